"""Thin Discord REST client used for channel posts, DMs and roster collection.

Without a bot token every call runs in offline mode: it logs what would have
been sent and returns an empty result.
"""

import logging
from typing import Dict, List, Optional

import requests


class DiscordError(Exception):
    pass


class DiscordClient:
    def __init__(self, token: str = '', api_base: str = 'https://discord.com/api/v10',
                 timeout: float = 5.0, logger: Optional[logging.Logger] = None):
        self.token = token or ''
        self.api_base = api_base.rstrip('/')
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self.session = requests.Session()
        if not self.token:
            self.logger.warning('[discord.offline] DISCORD_BOT_TOKEN missing, running in offline mode')

    @classmethod
    def from_config(cls, config, logger=None):
        return cls(
            token=config.get('DISCORD_BOT_TOKEN', ''),
            api_base=config.get('DISCORD_API_BASE', 'https://discord.com/api/v10'),
            timeout=float(config.get('DISCORD_TIMEOUT_SEC', 5)),
            logger=logger,
        )

    @property
    def online(self) -> bool:
        return bool(self.token)

    def _request(self, method: str, path: str, auth: Optional[str] = None, **kwargs):
        headers = {'Authorization': auth or f'Bot {self.token}'}
        try:
            response = self.session.request(method, f'{self.api_base}{path}', headers=headers,
                                            timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise DiscordError(f'{method} {path} failed: {exc}') from exc
        if response.status_code >= 400:
            raise DiscordError(f'{method} {path} returned {response.status_code}: {response.text[:200]}')
        return response.json() if response.content else None

    def post_to_channel(self, channel_id: str, content: str) -> None:
        if not self.online:
            self.logger.info(f"[discord.post.offline] channel={channel_id} length={len(content)}")
            return
        self._request('POST', f'/channels/{channel_id}/messages', json={'content': content})

    def send_direct_message(self, discord_user_id: str, content: str) -> None:
        if not self.online:
            self.logger.info(f"[discord.dm.offline] target={discord_user_id} length={len(content)}")
            return
        channel = self._request('POST', '/users/@me/channels', json={'recipient_id': discord_user_id})
        self._request('POST', f"/channels/{channel['id']}/messages", json={'content': content})

    def fetch_voice_participants(self, guild_id: Optional[str], voice_channel_id: str) -> List[Dict[str, str]]:
        """Return ``[{'id', 'nickname'}]`` for members currently in a voice channel."""
        if not self.online or not guild_id:
            self.logger.debug(f"[discord.voice.empty] channel={voice_channel_id} online={self.online} guild={guild_id}")
            return []
        # REST has no "members of a voice channel" listing; probe each member's voice state
        members = self._request('GET', f'/guilds/{guild_id}/members', params={'limit': 1000}) or []
        participants = []
        for member in members:
            user = member.get('user') or {}
            if user.get('bot'):
                continue
            try:
                state = self._request('GET', f"/guilds/{guild_id}/voice-states/{user['id']}")
            except DiscordError:
                # 404 when the member is not connected to voice
                continue
            if not state or state.get('channel_id') != voice_channel_id:
                continue
            nickname = member.get('nick') or user.get('global_name') or user.get('username') or user['id']
            participants.append({'id': str(user['id']), 'nickname': nickname})
        return participants

    def fetch_current_user(self, access_token: str) -> Dict[str, str]:
        """Resolve an OAuth access token to the Discord user it belongs to."""
        return self._request('GET', '/users/@me', auth=f'Bearer {access_token}')
