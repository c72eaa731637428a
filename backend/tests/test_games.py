import pytest

from groupplay import db
from groupplay.errors import Conflict
from groupplay.models import Game, GroupMember, PlayerStats
from groupplay.services import commit

from conftest import create_game, create_group, join_group, move


@pytest.fixture()
def trio(make_user):
    """Three users sharing one group: (group, [(client, user), ...])."""
    people = [make_user(name) for name in ('alice', 'bob', 'cara')]
    group = create_group(people[0][0])
    for user_client, _ in people[1:]:
        assert join_group(user_client, group['inviteCode']).status_code == 200
    return group, people


def _stats(flask_app, user_id, group_id, game_type):
    with flask_app.app_context():
        row = PlayerStats.query.filter_by(user_id=user_id, group_id=group_id, game_type=game_type).first()
        return row.to_dict() if row else None


def test_create_game_seats_creator(trio):
    group, [(alice, alice_user), _, _] = trio
    res = create_game(alice, group['id'], 'tic-tac-toe')
    assert res.status_code == 201
    game = res.get_json()
    assert game['status'] == 'waiting'
    assert game['currentTurn'] == alice_user['id']
    assert game['gameState'] == {'board': [None] * 9}
    assert game['winnerId'] is None
    [creator] = game['participants']
    assert creator['playerSymbol'] == 'X'
    assert creator['isSpectator'] is False


def test_second_open_game_is_conflict(trio):
    group, [(alice, _), (bob, _), _] = trio
    assert create_game(alice, group['id']).status_code == 201
    res = create_game(bob, group['id'], 'chess')
    assert res.status_code == 400
    assert res.get_json()['message'] == 'This group already has an active game'


def test_create_game_validation(trio):
    group, [(alice, _), _, _] = trio
    assert create_game(alice, group['id'], 'checkers').status_code == 400
    assert alice.post('/api/games', json={'gameType': 'chess'}).status_code == 400
    assert create_game(alice, 999, 'chess').status_code == 404


@pytest.mark.parametrize('game_type,symbols', [
    ('tic-tac-toe', ['X', 'O', '△']),
    ('coin-toss', ['player1', 'player2', 'player3']),
    ('word-battle', ['player1', 'player2', 'player3']),
])
def test_symbols_follow_join_order(trio, game_type, symbols):
    group, [(alice, _), (bob, _), (cara, _)] = trio
    game_id = create_game(alice, group['id'], game_type).get_json()['id']

    bob_join = bob.post(f'/api/games/{game_id}/join').get_json()['participant']
    cara_join = cara.post(f'/api/games/{game_id}/join').get_json()['participant']

    assert [symbols[0], bob_join['playerSymbol'], cara_join['playerSymbol']] == symbols
    assert not cara_join['isSpectator']


def test_chess_third_joiner_spectates(trio):
    group, [(alice, _), (bob, _), (cara, _)] = trio
    game = create_game(alice, group['id'], 'chess').get_json()
    assert game['participants'][0]['playerSymbol'] == 'white'

    bob_join = bob.post(f"/api/games/{game['id']}/join").get_json()['participant']
    assert bob_join['playerSymbol'] == 'black'
    res = cara.post(f"/api/games/{game['id']}/join")
    assert res.status_code == 200
    cara_join = res.get_json()['participant']
    assert cara_join['isSpectator'] is True
    assert cara_join['playerSymbol'] is None

    state = alice.get(f"/api/games/{game['id']}").get_json()
    assert len([p for p in state['participants'] if not p['isSpectator']]) == 2


def test_game_activates_at_min_players(trio):
    group, [(alice, _), (bob, _), _] = trio
    game_id = create_game(alice, group['id']).get_json()['id']
    assert alice.get(f'/api/games/{game_id}').get_json()['status'] == 'waiting'
    bob.post(f'/api/games/{game_id}/join')
    assert alice.get(f'/api/games/{game_id}').get_json()['status'] == 'active'


def test_join_game_errors(trio):
    group, [(alice, _), _, _] = trio
    game_id = create_game(alice, group['id']).get_json()['id']
    assert alice.post(f'/api/games/{game_id}/join').status_code == 400
    assert alice.post('/api/games/999/join').status_code == 404
    assert alice.get('/api/games/999').status_code == 404


def test_move_requires_active_game_and_turn(trio):
    group, [(alice, _), (bob, _), _] = trio
    game_id = create_game(alice, group['id']).get_json()['id']

    res = move(alice, game_id, {'position': 0})
    assert res.status_code == 400
    assert res.get_json()['message'] == 'Game is not active'

    bob.post(f'/api/games/{game_id}/join')
    res = move(bob, game_id, {'position': 0})
    assert res.status_code == 400
    assert res.get_json()['message'] == 'Not your turn'

    assert move(alice, 999, {'position': 0}).status_code == 404
    assert alice.post(f'/api/games/{game_id}/move', json={}).status_code == 400


def test_illegal_move_keeps_turn(trio):
    group, [(alice, alice_user), (bob, bob_user), _] = trio
    game_id = create_game(alice, group['id']).get_json()['id']
    bob.post(f'/api/games/{game_id}/join')

    first = move(alice, game_id, {'position': 4}).get_json()
    assert first['nextTurn'] == bob_user['id']
    assert move(bob, game_id, {'position': 4}).status_code == 400
    assert alice.get(f'/api/games/{game_id}').get_json()['currentTurn'] == bob_user['id']
    assert move(bob, game_id, {'position': 9}).status_code == 400


def test_win_updates_stats_and_frees_group(flask_app, trio):
    group, [(alice, alice_user), (bob, bob_user), (cara, cara_user)] = trio
    game_id = create_game(alice, group['id']).get_json()['id']
    bob.post(f'/api/games/{game_id}/join')

    for player, position in ((alice, 0), (bob, 3), (alice, 1), (bob, 4)):
        res = move(player, game_id, {'position': position})
        assert res.status_code == 200
        assert res.get_json()['status'] == 'active'

    final = move(alice, game_id, {'position': 2}).get_json()
    assert final['status'] == 'completed'
    assert final['winnerId'] == alice_user['id']
    assert final['nextTurn'] is None

    assert _stats(flask_app, alice_user['id'], group['id'], 'tic-tac-toe') == {
        'userId': alice_user['id'], 'groupId': group['id'], 'gameType': 'tic-tac-toe',
        'wins': 1, 'losses': 0, 'draws': 0, 'totalGames': 1,
    }
    bob_stats = _stats(flask_app, bob_user['id'], group['id'], 'tic-tac-toe')
    assert (bob_stats['wins'], bob_stats['losses'], bob_stats['totalGames']) == (0, 1, 1)
    assert _stats(flask_app, cara_user['id'], group['id'], 'tic-tac-toe') is None

    assert move(bob, game_id, {'position': 5}).get_json()['message'] == 'Game is not active'
    assert alice.get(f"/api/groups/{group['id']}/active-game").get_json() is None
    assert create_game(bob, group['id'], 'chess').status_code == 201

    board = alice.get(f"/api/groups/{group['id']}/leaderboard").get_json()
    assert board[0]['id'] == alice_user['id']
    assert board[0]['totalWins'] == 1


def test_draw_updates_every_player(flask_app, trio):
    group, [(alice, alice_user), (bob, bob_user), _] = trio
    game_id = create_game(alice, group['id']).get_json()['id']
    bob.post(f'/api/games/{game_id}/join')

    sequence = [(alice, 0), (bob, 1), (alice, 2), (bob, 4), (alice, 3),
                (bob, 5), (alice, 7), (bob, 6), (alice, 8)]
    for player, position in sequence:
        outcome = move(player, game_id, {'position': position}).get_json()

    assert outcome['status'] == 'completed'
    assert outcome['winnerId'] is None
    for user in (alice_user, bob_user):
        stats = _stats(flask_app, user['id'], group['id'], 'tic-tac-toe')
        assert (stats['wins'], stats['losses'], stats['draws'], stats['totalGames']) == (0, 0, 1, 1)


def test_spectators_get_no_stats(flask_app, trio):
    group, [(alice, alice_user), (bob, _), (cara, cara_user)] = trio
    game_id = create_game(alice, group['id'], 'chess').get_json()['id']
    bob.post(f'/api/games/{game_id}/join')
    cara.post(f'/api/games/{game_id}/join')

    outcome = move(alice, game_id, {'resign': True}).get_json()
    assert outcome['status'] == 'completed'
    assert outcome['winnerId'] != alice_user['id']
    assert _stats(flask_app, cara_user['id'], group['id'], 'chess') is None
    assert _stats(flask_app, alice_user['id'], group['id'], 'chess')['losses'] == 1


def test_active_game_endpoint(trio):
    group, [(alice, _), (bob, _), _] = trio
    assert alice.get(f"/api/groups/{group['id']}/active-game").get_json() is None

    game_id = create_game(alice, group['id'], 'word-battle').get_json()['id']
    bob.post(f'/api/games/{game_id}/join')
    active = bob.get(f"/api/groups/{group['id']}/active-game").get_json()
    assert active['id'] == game_id
    assert active['status'] == 'active'
    assert len(active['participants']) == 2


def test_non_member_cannot_create_or_join(make_user, trio):
    group, [(alice, _), _, _] = trio
    mallory, _ = make_user('mallory')

    res = create_game(mallory, group['id'])
    assert res.status_code == 400
    assert res.get_json()['message'] == 'You are not a member of this group'

    game_id = create_game(alice, group['id']).get_json()['id']
    res = mallory.post(f'/api/games/{game_id}/join')
    assert res.status_code == 400
    assert res.get_json()['message'] == 'You are not a member of this group'
    assert len(alice.get(f'/api/games/{game_id}').get_json()['participants']) == 1


def test_malformed_choice_is_rejected(trio):
    group, [(alice, _), (bob, _), _] = trio
    game_id = create_game(alice, group['id'], 'rock-paper-scissors').get_json()['id']
    bob.post(f'/api/games/{game_id}/join')

    res = move(alice, game_id, {'choice': ['rock']})
    assert res.status_code == 400
    assert res.get_json()['message'] == 'Choice must be rock, paper or scissors'
    assert move(alice, game_id, {'choice': 'rock'}).status_code == 200


class TestStorageConstraints:
    """Database-level guards that back up the service checks."""

    def test_second_open_game_rejected_by_index(self, flask_app, trio):
        group, _ = trio
        with flask_app.app_context():
            db.session.add(Game(group_id=group['id'], game_type='tic-tac-toe', status='waiting'))
            commit('duplicate')

            db.session.add(Game(group_id=group['id'], game_type='chess', status='active'))
            with pytest.raises(Conflict) as exc:
                commit('This group already has an active game')
            assert exc.value.message == 'This group already has an active game'

            db.session.add(Game(group_id=group['id'], game_type='chess', status='completed'))
            db.session.add(Game(group_id=group['id'], game_type='coin-toss', status='completed'))
            commit('duplicate')
            assert Game.query.filter_by(group_id=group['id']).count() == 3

    def test_duplicate_membership_rejected(self, flask_app, trio):
        group, [(_, alice_user), _, _] = trio
        with flask_app.app_context():
            db.session.add(GroupMember(group_id=group['id'], user_id=alice_user['id']))
            with pytest.raises(Conflict):
                commit('You are already a member of this group')
            assert GroupMember.query.filter_by(group_id=group['id']).count() == 3
