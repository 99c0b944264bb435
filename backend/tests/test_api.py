def test_index_points_at_socket_namespace(client):
    res = client.get('/')
    assert res.status_code == 200
    assert res.get_json()['namespace'] == '/ws'
    assert client.get('/admin').get_json()['role'] == 'admin'


def test_state_snapshot(client, flask_app):
    flask_app.extensions['brainbrawl'].add_player('s1', 'Alice')
    res = client.get('/api/state')
    assert res.status_code == 200
    state = res.get_json()
    assert state['gameState'] == 'lobby'
    assert state['totalRounds'] == 10
    assert any(p['name'] == 'Alice' for p in state['players'])


def test_public_config(client):
    data = client.get('/api/config').get_json()
    assert data['game']['buttonCount'] == 3
    assert data['features']['cpuTeams'] is False
    assert len(data['trashTalkPhrases']) == 10


def test_show_features_command(flask_app):
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['show-features'])
    assert result.exit_code == 0
    assert 'teams: on' in result.output
    assert 'cpuTeams: off' in result.output
