import json

from shelterplus.services.official_config import OfficialConfigService


def test_bundled_presets(client):
    presets = client.get('/config/official').get_json()
    assert len(presets) == 6
    assert presets[0]['apocalypse'] == 'Asteroid Impact'
    assert set(presets[0]) >= {'apocalypse', 'bunker', 'voiceChannelId', 'textChannelId'}


def test_entries_missing_fields_are_dropped():
    raw = json.dumps([
        {'apocalypse': 'A', 'bunker': 'B', 'voiceChannelId': '1', 'textChannelId': '2'},
        {'apocalypse': 'A', 'bunker': 'B', 'voiceChannelId': 1, 'textChannelId': '2'},
        {'apocalypse': 'A'},
        'nope',
    ])
    presets = OfficialConfigService(raw).get_all()
    assert presets == [{'apocalypse': 'A', 'bunker': 'B', 'voiceChannelId': '1', 'textChannelId': '2'}]


def test_malformed_json_yields_empty_list(caplog):
    service = OfficialConfigService("[{apocalypse: 'A'}]")
    assert service.get_all() == []
    assert 'unquoted' in caplog.text


def test_non_array_yields_empty_list():
    assert OfficialConfigService('{"apocalypse": "A"}').get_all() == []


def test_get_by_index_bounds():
    service = OfficialConfigService()
    assert service.get_by_index(0)['bunker'] == 'Mountain Shelter'
    assert service.get_by_index(-1) is None
    assert service.get_by_index(6) is None


def test_get_by_index_coerces_or_rejects_non_ints():
    service = OfficialConfigService()
    assert service.get_by_index('1')['bunker'] == 'Underground Labs'
    assert service.get_by_index('9') is None
    assert service.get_by_index('first') is None
    assert service.get_by_index(None) is None


def test_reload_replaces_cached_presets():
    service = OfficialConfigService()
    assert len(service.get_all()) == 6
    raw = json.dumps([{'apocalypse': 'X', 'bunker': 'Y', 'voiceChannelId': '1', 'textChannelId': '2'}])
    assert service.reload(raw) == [{'apocalypse': 'X', 'bunker': 'Y', 'voiceChannelId': '1', 'textChannelId': '2'}]
    assert service.get_by_index(0)['apocalypse'] == 'X'


def test_reload_cli_command(flask_app):
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['reload-official-config'])
    assert result.exit_code == 0
    assert 'Loaded 6 official presets' in result.output
