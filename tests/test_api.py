import datetime as dt

from gathering import config


def create_event(client, **fields):
    body = {"title": "정기 모임", "date": "2026-11-07", **fields}
    resp = client.post("/events", json=body)
    assert resp.status_code == 201
    return resp.json()["event"]


def create_poll(client, **fields):
    body = {"question": "Lunch?", "options": ["A", "B"], **fields}
    resp = client.post("/polls", json=body)
    assert resp.status_code == 201
    return resp.json()["poll"]


def test_health(client):
    resp = client.get("/health")
    assert resp.json() == {"ok": True, "group": config.GROUP_ID}


# ----------- events -----------

def test_rsvp_flow(client):
    event = create_event(client)
    url = f"/events/{event['id']}/rsvp"

    resp = client.post(url, json={"identity": "A", "display_name": "지운", "response": "attend"})
    assert resp.status_code == 200
    assert resp.json()["response"] == "attend"
    assert resp.json()["event"]["attending"] == ["A"]

    # same person on another device changes their answer
    resp = client.post(url, json={"identity": "B", "display_name": "지운", "response": "not_attend"})
    body = resp.json()
    assert body["event"]["attending"] == []
    assert body["event"]["not_attending"] == ["B"]
    assert body["event"]["display_name_of"] == {"B": "지운"}

    resp = client.post(url, json={"identity": "B", "display_name": "지운", "response": "not_attend"})
    assert resp.json()["response"] is None

    tally = client.get(f"/events/{event['id']}/tally").json()
    assert tally["counts"] == {"attend": 0, "not_attend": 0, "undecided": 0}


def test_rsvp_errors(client):
    resp = client.post("/events/missing/rsvp", json={"identity": "A", "display_name": "Kim", "response": "attend"})
    assert resp.status_code == 404
    assert resp.json()["detail"]["error_code"] == "INVALID_TARGET"

    event = create_event(client)
    resp = client.post(
        f"/events/{event['id']}/rsvp",
        json={"identity": "A", "display_name": "  ", "response": "attend"},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["error_code"] == "MISSING_IDENTITY"
    assert client.get(f"/events/{event['id']}").json()["attending"] == []

    resp = client.post(
        f"/events/{event['id']}/rsvp",
        json={"identity": "A", "display_name": "Kim", "response": "maybe"},
    )
    assert resp.status_code == 422


def test_event_listing_edit_and_delete(client):
    later = create_event(client, title="송년회", date="2026-12-20")
    sooner = create_event(client, title="번개", date="2026-10-30")

    titles = [e["title"] for e in client.get("/events").json()["events"]]
    assert titles == ["번개", "송년회"]

    client.post(f"/events/{sooner['id']}/rsvp", json={"identity": "A", "display_name": "Kim", "response": "attend"})
    resp = client.patch(f"/events/{sooner['id']}", json={"location": "홍대"})
    assert resp.json()["event"]["location"] == "홍대"
    assert resp.json()["event"]["attending"] == ["A"]

    assert client.patch(f"/events/{sooner['id']}", json={"title": " "}).status_code == 422

    assert client.delete(f"/events/{later['id']}").json() == {"ok": True}
    assert client.get(f"/events/{later['id']}").status_code == 404
    assert client.delete(f"/events/{later['id']}").status_code == 404


# ----------- polls -----------

def test_single_choice_poll_flow(client):
    poll = create_poll(client)
    o1, o2 = (o["option_id"] for o in poll["options"])
    url = f"/polls/{poll['id']}/vote"

    body = client.post(url, json={"identity": "u1", "display_name": "Kim", "option_id": o1}).json()
    assert body["selection"] == [o1]
    assert body["poll"]["total_votes"] == 1

    body = client.post(url, json={"identity": "u1", "display_name": "Kim", "option_id": o2}).json()
    assert [o["vote_count"] for o in body["poll"]["options"]] == [0, 1]
    assert body["poll"]["total_votes"] == 1

    body = client.post(url, json={"identity": "u1", "display_name": "Kim", "option_id": o2}).json()
    assert body["selection"] == []
    assert body["poll"]["total_votes"] == 0


def test_multi_choice_poll_flow_and_results(client):
    poll = create_poll(client, allow_multiple=True)
    o1, o2 = (o["option_id"] for o in poll["options"])
    url = f"/polls/{poll['id']}/vote"

    for option_id in (o1, o2, o1):
        client.post(url, json={"identity": "u1", "display_name": "Kim", "option_id": option_id})

    r = client.get(f"/polls/{poll['id']}/results").json()
    assert r["total_votes"] == 1
    assert r["participants"] == 1
    assert [o["voters"] for o in r["options"]] == [[], ["Kim"]]


def test_unknown_option_leaves_poll_unchanged(client):
    poll = create_poll(client)
    resp = client.post(
        f"/polls/{poll['id']}/vote",
        json={"identity": "u1", "display_name": "Kim", "option_id": "nope"},
    )
    assert resp.status_code == 404
    assert client.get(f"/polls/{poll['id']}").json()["total_votes"] == 0


def test_add_option(client):
    locked = create_poll(client)
    resp = client.post(f"/polls/{locked['id']}/options", json={"text": "C"})
    assert resp.status_code == 403
    assert resp.json()["detail"]["error_code"] == "ADD_OPTIONS_DISABLED"

    poll = create_poll(client, allow_add_options=True)
    resp = client.post(f"/polls/{poll['id']}/options", json={"text": "C"})
    assert resp.status_code == 201
    assert resp.json()["option"]["text"] == "C"
    assert len(resp.json()["poll"]["options"]) == 3


def test_add_option_respects_option_limit(client, monkeypatch):
    monkeypatch.setattr(config, "MAX_OPTIONS", 2)
    poll = create_poll(client, allow_add_options=True)
    resp = client.post(f"/polls/{poll['id']}/options", json={"text": "C"})
    assert resp.status_code == 422


def test_expired_poll_rejects_votes_before_the_engine_runs(client, monkeypatch):
    poll = create_poll(client, end_date="2026-11-30", allow_add_options=True)
    o1 = poll["options"][0]["option_id"]
    vote = {"identity": "u1", "display_name": "Kim", "option_id": o1}

    monkeypatch.setattr(config, "today", lambda: dt.date(2026, 11, 30))
    assert client.post(f"/polls/{poll['id']}/vote", json=vote).status_code == 200

    monkeypatch.setattr(config, "today", lambda: dt.date(2026, 12, 1))
    resp = client.post(f"/polls/{poll['id']}/vote", json=vote)
    assert resp.status_code == 409
    assert resp.json()["detail"]["error_code"] == "EXPIRED_POLL"
    assert client.post(f"/polls/{poll['id']}/options", json={"text": "C"}).status_code == 409

    r = client.get(f"/polls/{poll['id']}/results").json()
    assert r["closed"] is True
    assert r["total_votes"] == 1


def test_poll_listing_and_delete(client):
    first = create_poll(client, question="First?")
    create_poll(client, question="Second?")

    questions = [p["question"] for p in client.get("/polls").json()["polls"]]
    assert questions == ["Second?", "First?"]

    assert client.delete(f"/polls/{first['id']}").json() == {"ok": True}
    assert client.get(f"/polls/{first['id']}").status_code == 404


def test_create_poll_validation(client):
    assert client.post("/polls", json={"question": "Q?", "options": ["", " "]}).status_code == 422
