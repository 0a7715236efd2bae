from skillswap import db
from skillswap.models import FriendRequest, Message


def _matches(client, headers, query=''):
    resp = client.get(f'/api/matchskills{query}', headers=headers)
    assert resp.status_code == 200
    return resp.get_json()['matches']


def test_no_skills_means_no_matches(client, make_user, add_skill, auth_headers):
    me = make_user()
    other = make_user()
    add_skill(other, 'Python')
    assert _matches(client, auth_headers(me)) == []


def test_complementary_matches(client, make_user, add_skill, auth_headers):
    me = make_user(first_name='Me')
    add_skill(me, 'Python', 'offer')
    add_skill(me, 'Guitar', 'need')

    teacher = make_user(first_name='Gina', last_name='Strings')
    add_skill(teacher, 'Guitar', 'offer')
    add_skill(teacher, 'Cooking', 'offer')

    learner = make_user(first_name='Leo')
    add_skill(learner, 'Python', 'need')
    add_skill(learner, 'Guitar', 'need')

    both = make_user(first_name='Bea')
    add_skill(both, 'Guitar', 'offer')
    add_skill(both, 'Python', 'need')

    # Offers what I offer: no complement
    same_side = make_user(first_name='Sam')
    add_skill(same_side, 'Python', 'offer')

    matches = _matches(client, auth_headers(me))
    assert [m['_id'] for m in matches] == [both.id, teacher.id, learner.id]

    best = matches[0]
    assert best['score'] == 2
    assert best['firstName'] == 'Bea'
    assert sorted(best['skills']) == ['Guitar', 'Python']
    assert best['theyOffer'] == ['Guitar']
    assert best['theyNeed'] == ['Python']

    gina = matches[1]
    assert gina['skills'] == ['Guitar']
    assert gina['lastName'] == 'Strings'
    assert gina['theyNeed'] == []

    leo = matches[2]
    assert leo['skills'] == ['Python']
    assert leo['theyOffer'] == []


def test_matches_exclude_unverified_users(client, make_user, add_skill, auth_headers):
    me = make_user()
    add_skill(me, 'Guitar', 'need')
    pending = make_user(verified=False)
    add_skill(pending, 'Guitar', 'offer')

    assert _matches(client, auth_headers(me)) == []


def test_matches_exclude_existing_relationships(client, make_user, add_skill, auth_headers):
    me = make_user()
    add_skill(me, 'Guitar', 'need')

    requested = make_user()
    friend = make_user()
    declined = make_user()
    chatted = make_user()
    messaged = make_user()
    stranger = make_user()
    for user in (requested, friend, declined, chatted, messaged, stranger):
        add_skill(user, 'Guitar', 'offer')

    db.session.add_all([
        FriendRequest(from_user_id=me.id, to_user_id=requested.id, status='pending'),
        FriendRequest(from_user_id=friend.id, to_user_id=me.id, status='accepted'),
        FriendRequest(from_user_id=me.id, to_user_id=declined.id, status='declined'),
        Message(from_user_id=chatted.id, to_user_id=me.id, body='hi'),
        Message(from_user_id=me.id, to_user_id=messaged.id, body='hello'),
    ])
    db.session.commit()

    headers = auth_headers(me)
    assert [m['_id'] for m in _matches(client, headers)] == [declined.id, stranger.id]

    everyone = _matches(client, headers, '?include_connected=true')
    assert [m['_id'] for m in everyone] == [requested.id, friend.id, declined.id, chatted.id, messaged.id, stranger.id]


def test_match_limit(client, make_user, add_skill, auth_headers):
    me = make_user()
    add_skill(me, 'Guitar', 'need')
    for _ in range(3):
        add_skill(make_user(), 'Guitar', 'offer')

    assert len(_matches(client, auth_headers(me), '?limit=2')) == 2


def test_unfriended_user_is_suggested_again(client, make_user, add_skill, auth_headers):
    me = make_user()
    add_skill(me, 'Guitar', 'need')
    friend = make_user()
    add_skill(friend, 'Guitar', 'offer')
    db.session.add(FriendRequest(from_user_id=me.id, to_user_id=friend.id, status='accepted'))
    db.session.commit()

    headers = auth_headers(me)
    assert _matches(client, headers) == []

    resp = client.delete(f'/api/friends/{friend.id}', headers=headers)
    assert resp.status_code == 200
    assert [m['_id'] for m in _matches(client, headers)] == [friend.id]
