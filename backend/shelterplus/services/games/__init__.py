"""Game domain services: dealing, rounds, reveals, minutes, voting, invites.

This package contains the game rules that HTTP routes and socket handlers
import, keeping transport concerns separated from core game mechanics.
Every mutation commits its state change and its GameEvent together, then
fans out to the game's Socket.IO room (and Discord where relevant).
"""
