import base64
import os

from spotguess.api.uploads import decode_data_uri, safe_filename
from spotguess.services.game.commands import RevealArea, StartRound
from helpers import join

PNG_BYTES = b'\x89PNG\r\n\x1a\nfake-image'


def data_url(raw=PNG_BYTES, mime='image/png'):
    return f'data:{mime};base64,' + base64.b64encode(raw).decode('ascii')


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_state_endpoint(client, game_session):
    res = client.get('/api/state')
    assert res.status_code == 200
    state = res.get_json()
    assert state == {'teams': {}, 'players': {}, 'turnTeamId': None, 'round': None, 'phase': None}

    join(game_session, 'sid-1', 'Ann', 'Alpha')
    game_session.dispatch(StartRound(question='Where?'))
    state = client.get('/api/state').get_json()
    assert state['phase'] == 'countdown'
    assert state['round']['question'] == 'Where?'
    assert state['players']['sid-1']['teamName'] == 'Alpha'


def test_history_endpoint(client, game_session):
    assert client.get('/api/history').get_json() == []
    game_session.dispatch(StartRound(question='Q'))
    game_session.dispatch(RevealArea())
    history = client.get('/api/history').get_json()
    assert len(history) == 1
    assert history[0]['question'] == 'Q'
    assert history[0]['winners'] == []


def test_upload_saves_files(client, flask_app):
    res = client.post('/admin/upload', json={'files': [
        {'name': 'my cat.png', 'dataUrl': data_url()},
        {'name': 'broken.png', 'dataUrl': 'not a data url'},
    ]})
    assert res.status_code == 200
    body = res.get_json()
    assert body == {'ok': True, 'urls': ['/uploads/my_cat.png']}
    path = os.path.join(flask_app.config['UPLOAD_FOLDER'], 'my_cat.png')
    with open(path, 'rb') as fh:
        assert fh.read() == PNG_BYTES

    served = client.get('/uploads/my_cat.png')
    assert served.status_code == 200
    assert served.data == PNG_BYTES
    served.close()


def test_upload_requires_files(client):
    assert client.post('/admin/upload', json={}).status_code == 400
    res = client.post('/admin/upload', json={'files': []})
    assert res.status_code == 400
    assert res.get_json() == {'error': 'No files'}


def test_upload_bad_base64_is_server_error(client):
    res = client.post('/admin/upload', json={'files': [{'name': 'a.png', 'dataUrl': 'data:image/png;base64,abc'}]})
    assert res.status_code == 500
    assert 'error' in res.get_json()


def test_upload_does_not_touch_round(client, game_session):
    game_session.dispatch(StartRound(question='Keep me'))
    round_id = game_session.round.id
    client.post('/admin/upload', json={'files': [{'name': 'a.png', 'dataUrl': data_url()}]})
    assert game_session.round.id == round_id


def test_safe_filename():
    assert safe_filename('../../etc/passwd') == '.._.._etc_passwd'
    assert safe_filename('Ok-File_1.JPG') == 'Ok-File_1.JPG'
    assert safe_filename('..') == 'upload'
    assert safe_filename(None) == 'upload'


def test_decode_data_uri():
    assert decode_data_uri(data_url(b'hello')) == b'hello'
    assert decode_data_uri('hello') is None
    assert decode_data_uri(None) is None


def test_clear_uploads_command(client, flask_app):
    client.post('/admin/upload', json={'files': [{'name': 'a.png', 'dataUrl': data_url()}]})
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['clear-uploads'])
    assert 'Removed 1 uploaded file(s).' in result.output
    assert os.listdir(flask_app.config['UPLOAD_FOLDER']) == []
