import sys
import os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from conftest import make_config
from agroconnect import DEMO_PASSWORD, DEMO_USERS, seed_demo_users_if_needed
from seed_demo_users import seed_demo_users


def test_seed_script_reports_created_users(tmp_path, capsys):
    class Config(make_config('json', tmp_path)):
        SEED_DEMO_USERS = True

    emails = [user['email'] for user in DEMO_USERS]

    result = seed_demo_users(Config)
    assert result['created'] == emails
    output = capsys.readouterr().out
    assert 'Demo users created successfully!' in output
    assert DEMO_PASSWORD in output

    result = seed_demo_users(Config)
    assert result == {'created': [], 'skipped': emails}
    assert 'already exist' in capsys.readouterr().out


def test_seeded_accounts_can_log_in(app, client):
    with app.app_context():
        seed_demo_users_if_needed(app)

    expert = DEMO_USERS[-1]
    resp = client.post('/api/auth/login', json={'email': expert['email'], 'password': DEMO_PASSWORD})
    assert resp.status_code == 200
