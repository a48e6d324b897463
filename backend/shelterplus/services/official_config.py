"""Official lobby presets: scenario text plus the Discord channels to use."""

import json
import logging
import re
from typing import List, Optional

BUNDLED_OFFICIAL_CONFIG_JSON = json.dumps([
    {'apocalypse': 'Asteroid Impact', 'bunker': 'Mountain Shelter', 'voiceChannelId': '123', 'textChannelId': '456'},
    {'apocalypse': 'Global Pandemic', 'bunker': 'Underground Labs', 'voiceChannelId': '234', 'textChannelId': '567'},
    {'apocalypse': 'Solar Flare Catastrophe', 'bunker': 'Polar Research Vault', 'voiceChannelId': '345', 'textChannelId': '678'},
    {'apocalypse': 'Alien Invasion', 'bunker': 'Desert Command Center', 'voiceChannelId': '456', 'textChannelId': '789'},
    {'apocalypse': 'Global Flood', 'bunker': 'Floating Ark', 'voiceChannelId': '567', 'textChannelId': '890'},
    {'apocalypse': 'Nuclear Winter', 'bunker': 'Subterranean Metro Complex', 'voiceChannelId': '678', 'textChannelId': '901'},
])

REQUIRED_KEYS = ('apocalypse', 'bunker', 'voiceChannelId', 'textChannelId')


class OfficialConfigService:
    """Parses the preset list once and serves it until ``reload`` is called."""

    def __init__(self, raw: Optional[str] = None, logger: Optional[logging.Logger] = None):
        self.raw = raw
        self.logger = logger or logging.getLogger(__name__)
        self._cached: Optional[List[dict]] = None

    def get_all(self) -> List[dict]:
        if self._cached is None:
            self._cached = self._parse(self.raw if self.raw is not None else BUNDLED_OFFICIAL_CONFIG_JSON)
        return self._cached

    def get_by_index(self, index) -> Optional[dict]:
        presets = self.get_all()
        try:
            index = int(index)
        except (TypeError, ValueError):
            self.logger.warning(f"[official-config] invalid preset index {index!r}")
            return None
        if index < 0 or index >= len(presets):
            return None
        return presets[index]

    def reload(self, raw: Optional[str] = None) -> List[dict]:
        if raw is not None:
            self.raw = raw
        self._cached = None
        return self.get_all()

    def _parse(self, raw: str) -> List[dict]:
        try:
            parsed = json.loads(raw)
        except ValueError as exc:
            self.logger.error(f"[official-config] failed to parse OFFICIAL_CONFIG_JSON: {exc}")
            self._log_parsing_hint(raw)
            return []
        if not isinstance(parsed, list):
            self.logger.warning('[official-config] OFFICIAL_CONFIG_JSON is not a JSON array; ignoring it')
            return []
        return [
            entry for entry in parsed
            if isinstance(entry, dict) and all(isinstance(entry.get(k), str) for k in REQUIRED_KEYS)
        ]

    def _log_parsing_hint(self, raw: str) -> None:
        trimmed = (raw or '').strip()
        if not trimmed:
            self.logger.warning('[official-config] OFFICIAL_CONFIG_JSON is empty after trimming whitespace.')
            return
        preview = trimmed if len(trimmed) <= 200 else trimmed[:200] + '...'
        self.logger.warning(f"[official-config] value preview: {preview}")
        if re.search(r'[{,]\s*[A-Za-z0-9_]+\s*:', trimmed):
            self.logger.warning('[official-config] some keys look unquoted. Expected format: {"guildId": "123"}.')
        if '\\' in trimmed:
            self.logger.warning('[official-config] found backslashes. In a .env file keep the plain JSON without escaping.')
