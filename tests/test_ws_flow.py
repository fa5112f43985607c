"""
Websocket flow of one team device: lobby, start signal, answering, results.
"""

import pytest
from fastapi import WebSocketDisconnect

from test_api import API, create_team, join, seed_round, sign_in


def receive_until(ws, predicate, limit=20):
    seen = []
    for _ in range(limit):
        msg = ws.receive_json()
        seen.append(msg)
        if predicate(msg):
            return msg
    raise AssertionError(f"expected message not received, got {seen}")


def is_state(phase, index=None):
    def check(msg):
        return msg["type"] == "state_sync" and msg["phase"] == phase and (index is None or msg["index"] == index)

    return check


def setup_team(client, questions=2):
    seed_round(client, questions)
    team = create_team(client, "T1")
    identity = sign_in(client)
    assert join(client, identity, team["id"]).status_code == 200
    return team, identity


def test_answer_view_without_index_is_fatal(client):
    _, identity = setup_team(client)
    with client.websocket_connect(f"/ws/play?view=answer&identity={identity}") as ws:
        msg = ws.receive_json()
    assert msg == {
        "type": "error",
        "code": "missing_parameter",
        "message": "Quiz index is not specified",
        "fatal": True,
    }


def test_reopening_answer_view_without_index_closes_session(client):
    _, identity = setup_team(client)
    with client.websocket_connect(f"/ws/play?view=answer&index=0&identity={identity}") as ws:
        assert ws.receive_json()["phase"] == "answering"

        ws.send_json({"type": "view:open", "path": "/answer", "params": {}})
        err = ws.receive_json()
        assert err["code"] == "missing_parameter"
        assert err["fatal"] is True

        with pytest.raises(WebSocketDisconnect) as closed:
            ws.receive_json()
        assert closed.value.code == 1008


def test_full_round_over_websocket(client):
    team, identity = setup_team(client, questions=2)

    with client.websocket_connect(f"/ws/play?view=waiting&identity={identity}") as ws:
        lobby = ws.receive_json()
        assert lobby["type"] == "state_sync" and lobby["phase"] == "lobby"

        assert client.post(f"{API}/game/start").status_code == 200

        nav = receive_until(ws, lambda m: m["type"] == "navigate")
        assert nav["url"] == "/answer?index=0"
        first = receive_until(ws, is_state("answering", 0))
        assert first["quiz"]["options"] == ["A", "B", "C", "D"]
        assert first["teamId"] == team["id"]
        assert first["canConfirm"] is False

        ws.send_json({"type": "answer:select", "optionIndex": 0})
        selected = receive_until(ws, lambda m: m["type"] == "state_sync" and m["selectedOption"] == 0)
        assert selected["canConfirm"] is True

        ws.send_json({"type": "answer:confirm"})
        nav = receive_until(ws, lambda m: m["type"] == "navigate")
        assert nav["params"] == {"index": "1"}
        receive_until(ws, is_state("answering", 1))

        ws.send_json({"type": "answer:select", "optionIndex": 1})
        ws.send_json({"type": "answer:confirm"})
        nav = receive_until(ws, lambda m: m["type"] == "navigate")
        assert nav["url"] == "/result-waiting"
        receive_until(ws, is_state("results_wait"))

    board = client.get(f"{API}/results").json()
    assert board == [{"teamId": team["id"], "name": "T1", "answered": 2, "correct": 2}]


def test_reload_resumes_from_index_parameter(client):
    _, identity = setup_team(client, questions=3)
    client.post(f"{API}/game/start")

    with client.websocket_connect(f"/ws/play?view=answer&index=2&identity={identity}") as ws:
        state = ws.receive_json()
        assert state["phase"] == "answering"
        assert state["index"] == 2
        assert state["quiz"]["question"] == "Question 3?"

        ws.send_json({"type": "view:open", "path": "/answer", "params": {"index": 1}})
        state = receive_until(ws, is_state("answering", 1))
        assert state["quiz"]["question"] == "Question 2?"


def test_confirm_without_selection_reports_error(client):
    _, identity = setup_team(client)

    with client.websocket_connect(f"/ws/play?view=answer&index=0&identity={identity}") as ws:
        ws.receive_json()
        ws.send_json({"type": "answer:confirm"})
        err = ws.receive_json()
        assert err["type"] == "error"
        assert err["code"] == "no_selection"
        assert err["fatal"] is False

        ws.send_json({"type": "mystery"})
        assert ws.receive_json()["code"] == "validation_error"

        # the session stays usable
        ws.send_json({"type": "answer:select", "optionIndex": 3})
        assert ws.receive_json()["selectedOption"] == 3


def test_second_tab_of_same_team_advances_without_error(client):
    _, identity = setup_team(client)
    client.post(f"{API}/game/start")
    quiz_id = client.get(f"{API}/quizzes/0").json()["id"]
    client.post(f"{API}/answers", json={"quizId": quiz_id, "optionIndex": 2}, headers={"X-Identity": identity})

    with client.websocket_connect(f"/ws/play?view=answer&index=0&identity={identity}") as ws:
        ws.receive_json()
        ws.send_json({"type": "answer:select", "optionIndex": 0})
        ws.send_json({"type": "answer:confirm"})
        nav = receive_until(ws, lambda m: m["type"] in ("navigate", "error"))
        assert nav["type"] == "navigate"
        assert nav["url"] == "/answer?index=1"

    answers = client.get(f"{API}/answers/{quiz_id}").json()
    assert [a["optionIndex"] for a in answers] == [2]


def test_join_team_over_websocket(client):
    seed_round(client)
    team = create_team(client, "Owls")
    identity = sign_in(client)

    with client.websocket_connect(f"/ws/play?view=waiting&identity={identity}") as ws:
        ws.receive_json()
        ws.send_json({"type": "team:join", "teamId": team["id"]})
        assert ws.receive_json()["type"] == "state_sync"

    me = client.get(f"{API}/teams/me", headers={"X-Identity": identity}).json()
    assert me["teamId"] == team["id"]
