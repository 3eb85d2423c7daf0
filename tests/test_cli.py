import json
import pytest
from candela.cli import main

@pytest.fixture
def cfg_path(tmp_path, monkeypatch):
    for var in ('CANDELA_STATUS_FILE', 'CANDELA_MODE', 'CANDELA_DAY_TEMP', 'CANDELA_NIGHT_TEMP'):
        monkeypatch.delenv(var, raising=False)
    p = tmp_path / "config.yaml"
    p.write_text(f"daemon: {{status_file: {tmp_path / 'candela.status'}}}\n")
    return str(p)

def test_status_and_now(cfg_path, tmp_path, capsys):
    (tmp_path / 'candela.status').write_text("temp=4000\nphase=transitioning_to_night\ntarget=4000\nprogress=0.50\n")
    assert main(['--config', cfg_path, 'status']) == 0
    assert capsys.readouterr().out == "temp=4000\nphase=transitioning_to_night\ntarget=4000\nprogress=0.50\n"
    assert main(['--config', cfg_path, 'now']) == 0
    assert capsys.readouterr().out == "4000K\n"
    assert main(['--config', cfg_path, '--json', 'status']) == 0
    data = json.loads(capsys.readouterr().out)
    assert data['phase'] == 'transitioning_to_night' and data['progress'] == 0.5

def test_status_without_daemon(cfg_path, capsys):
    assert main(['--config', cfg_path, 'status']) == 0
    assert "phase=unknown" in capsys.readouterr().out

def test_set_queues_command(cfg_path, tmp_path, capsys):
    assert main(['--config', cfg_path, 'set', '3000']) == 0
    assert "3000K" in capsys.readouterr().out
    assert (tmp_path / 'candela.control').read_text() == "set 3000\n"

@pytest.mark.parametrize("value", ["abc", "0", "-20", "100000"])
def test_set_rejects_bad_values(cfg_path, tmp_path, capsys, value):
    assert main(['--config', cfg_path, 'set', '--', value]) == 1
    assert "candela:" in capsys.readouterr().err
    assert not (tmp_path / 'candela.control').exists()

def test_pause_resume(cfg_path, tmp_path, capsys):
    assert main(['--config', cfg_path, 'pause']) == 0
    assert main(['--config', cfg_path, '-q', 'resume']) == 0
    assert capsys.readouterr().out == "Paused\n"
    assert (tmp_path / 'candela.control').read_text() == "pause\nresume\n"

def test_dry_run_set_does_not_queue(cfg_path, tmp_path):
    assert main(['--config', cfg_path, '--dry-run', 'set', '3000']) == 0
    assert not (tmp_path / 'candela.control').exists()

def test_config_output(cfg_path, capsys):
    assert main(['--config', cfg_path, '--json', 'config']) == 0
    data = json.loads(capsys.readouterr().out)
    assert data['mode'] == 'auto' and data['temperature']['day'] == 6500
    assert main(['--config', cfg_path, 'config']) == 0
    assert "duration_minutes: 60" in capsys.readouterr().out

def test_bad_config_exit_code(tmp_path, capsys):
    p = tmp_path / "bad.yaml"
    p.write_text("location: {latitude: 100}\n")
    assert main(['--config', str(p), 'status']) == 2
    assert "location.latitude" in capsys.readouterr().err
