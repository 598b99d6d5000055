import pytest
from datetime import date, timedelta
from sqlmodel import select
from league.models import Entry
from league.services.clock import Clock, get_clock
from league.services.entries import EntryStateError, submit_entry
from league.services.leaderboard import league_overview, member_dashboard

from main import app

from conftest import TODAY

YESTERDAY = TODAY - timedelta(days=1)


def add_entry(session, account, day, status="approved", kind="workout", rr=1.0):
    entry = Entry(user_id=account.id, team_id=account.team_id, date=day, kind=kind,
                  activity_type=None if kind == "rest" else "gym",
                  duration=None if kind == "rest" else 45, rr_value=rr, status=status)
    session.add(entry)
    session.commit()
    session.refresh(entry)
    return entry


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_unauthenticated_access(client):
    assert client.get("/api/leaderboard/teams").status_code == 401
    assert client.post("/api/entries", json={"kind": "rest"}).status_code == 401


def test_submit_workout(client, teams, make_account, login_as):
    player = make_account("asha", team=teams["alpha"])
    login_as(player)

    response = client.post("/api/entries", json={"kind": "workout", "activity_type": "steps", "steps": 12000})
    assert response.status_code == 200
    data = response.json()
    assert data["created"] is True
    assert data["entry"]["date"] == TODAY.isoformat()
    assert data["entry"]["status"] == "pending"
    assert data["entry"]["team_id"] == teams["alpha"].id
    assert abs(data["entry"]["rr_value"] - 1.2) < 1e-9


def test_submit_overwrites_pending_entry_for_today(client, teams, make_account, login_as, session):
    player = make_account("asha", team=teams["alpha"])
    login_as(player)

    client.post("/api/entries", json={"kind": "workout", "activity_type": "gym", "duration": 45})
    response = client.post("/api/entries", json={"kind": "rest"})
    assert response.status_code == 200
    assert response.json()["created"] is False

    entries = session.exec(select(Entry).where(Entry.user_id == player.id)).all()
    assert len(entries) == 1
    assert entries[0].kind == "rest"
    assert entries[0].rr_value == 1.0


def test_submit_rejects_invalid_workout(client, teams, make_account, login_as):
    login_as(make_account("asha", team=teams["alpha"]))

    response = client.post("/api/entries", json={"kind": "workout", "activity_type": "steps", "steps": 5000})
    assert response.status_code == 400
    assert "10,000" in response.json()["detail"]

    response = client.post("/api/entries", json={
        "kind": "workout", "activity_type": "cycling", "duration": 60, "distance": 20
    })
    assert response.status_code == 400


def test_senior_thresholds_apply(client, teams, make_account, login_as):
    login_as(make_account("nana", team=teams["alpha"], age=70))
    response = client.post("/api/entries", json={"kind": "workout", "activity_type": "steps", "steps": 5000})
    assert response.status_code == 200
    assert response.json()["entry"]["rr_value"] == 1.0


def test_long_workout_is_flagged_for_verification(client, teams, make_account, login_as):
    login_as(make_account("asha", team=teams["alpha"]))
    response = client.post("/api/entries", json={"kind": "workout", "activity_type": "gym", "duration": 90})
    assert response.json()["needs_verification"] is True


def test_only_today_or_yesterday(client, teams, make_account, login_as):
    login_as(make_account("asha", team=teams["alpha"]))
    response = client.post("/api/entries", json={
        "kind": "rest", "date": (TODAY - timedelta(days=2)).isoformat()
    })
    assert response.status_code == 400


def test_yesterday_only_when_rejected(client, teams, make_account, login_as, session):
    player = make_account("asha", team=teams["alpha"])
    login_as(player)

    response = client.post("/api/entries", json={"kind": "rest", "date": YESTERDAY.isoformat()})
    assert response.status_code == 409

    rejected = add_entry(session, player, YESTERDAY, status="rejected")
    response = client.post("/api/entries", json={
        "kind": "workout", "activity_type": "gym", "duration": 50, "date": YESTERDAY.isoformat()
    })
    assert response.status_code == 200
    data = response.json()
    assert data["created"] is False
    assert data["entry"]["id"] == rejected.id
    assert data["entry"]["status"] == "pending"


def test_approved_entry_is_final(client, teams, make_account, login_as, session):
    player = make_account("asha", team=teams["alpha"])
    add_entry(session, player, TODAY, status="approved")
    login_as(player)

    response = client.post("/api/entries", json={"kind": "rest"})
    assert response.status_code == 409


def test_leader_reviews_own_team(client, teams, make_account, login_as):
    player = make_account("asha", team=teams["alpha"])
    leader = make_account("lead", role="leader", team=teams["alpha"])
    other_leader = make_account("other", role="leader", team=teams["crusaders"])

    login_as(player)
    entry_id = client.post("/api/entries", json={"kind": "rest"}).json()["entry"]["id"]
    assert client.post(f"/api/entries/{entry_id}/approve").status_code == 403

    login_as(other_leader)
    assert client.post(f"/api/entries/{entry_id}/approve").status_code == 403

    login_as(leader)
    pending = client.get("/api/team/pending").json()
    assert [e["id"] for e in pending] == [entry_id]

    response = client.post(f"/api/entries/{entry_id}/approve")
    assert response.status_code == 200
    assert response.json()["status"] == "approved"

    # No further transitions once reviewed
    assert client.post(f"/api/entries/{entry_id}/reject").status_code == 409
    assert client.post("/api/entries/9999/approve").status_code == 404


def test_team_leaderboard(client, teams, make_account, login_as, session):
    alpha_players = [make_account(f"a{i}", team=teams["alpha"]) for i in range(2)]
    crusader = make_account("c0", team=teams["crusaders"])

    for player in alpha_players:
        add_entry(session, player, date(2025, 10, 20), rr=1.5)
    add_entry(session, crusader, date(2025, 10, 20))
    add_entry(session, crusader, date(2025, 10, 21))
    add_entry(session, crusader, date(2025, 10, 22), status="pending")

    login_as(crusader)
    response = client.get("/api/leaderboard/teams", params={"period": "week-1"})
    assert response.status_code == 200
    data = response.json()
    assert data["start"] == "2025-10-15"
    assert data["end"] == "2025-10-21"

    standings = data["standings"]
    assert [row["entity_name"] for row in standings] == ["Alpha", "Crusaders"]
    assert standings[0]["points"] == 2
    assert standings[0]["avg_rr"] == 1.5
    # 2 raw points * 10/11 rounds to 2
    assert standings[1]["raw_points"] == 2
    assert standings[1]["points"] == 2
    assert standings[1]["position_delta"] == 0


def test_leaderboard_bad_period(client, make_account, login_as):
    login_as(make_account("asha"))
    assert client.get("/api/leaderboard/teams", params={"period": "week-abc"}).status_code == 400
    assert client.get("/api/leaderboard/teams", params={"start": "2025-10-15"}).status_code == 400


def test_individual_leaderboard(client, teams, make_account, login_as, session):
    asha = make_account("asha", team=teams["alpha"])
    ravi = make_account("ravi", team=teams["alpha"])
    make_account("governor2", role="governor")
    add_entry(session, ravi, date(2025, 10, 16))
    add_entry(session, ravi, date(2025, 10, 17))
    add_entry(session, asha, date(2025, 10, 16))

    login_as(asha)
    response = client.get("/api/leaderboard/individuals", params={"period": "overall", "per_page": 1})
    data = response.json()
    assert data["total"] == 2
    assert data["total_pages"] == 2
    assert data["standings"][0]["entity_name"] == "Ravi"
    assert data["standings"][0]["team_name"] == "Alpha"


def test_dashboard_counts_missed_days(client, teams, make_account, login_as, session):
    asha = make_account("asha", team=teams["alpha"])
    ravi = make_account("ravi", team=teams["alpha"])
    for n in (0, 1, 2, 4, 6):
        add_entry(session, asha, date(2025, 10, 15) + timedelta(days=n), kind="rest" if n == 1 else "workout")
    # Today's entry never affects the as-of numbers
    add_entry(session, asha, TODAY)

    login_as(asha)
    data = client.get("/api/dashboard").json()
    assert data["as_of"] == YESTERDAY.isoformat()
    assert data["me"]["points"] == 5
    assert data["me"]["missed_days"] == 2
    assert data["me"]["rest_days"] == 1
    # Ravi has logged nothing in the seven days
    assert data["team"]["missed_days"] == 2 + 7
    assert data["team"]["points"] == 5


def test_team_members_summary(client, teams, make_account, login_as, session):
    asha = make_account("asha", team=teams["alpha"])
    make_account("ravi", team=teams["alpha"])
    add_entry(session, asha, date(2025, 10, 21), rr=2.0)

    login_as(asha)
    members = client.get("/api/team/members", params={"period": "week-1"}).json()
    assert [m["name"] for m in members] == ["Asha", "Ravi"]
    assert members[0]["points"] == 1
    assert members[0]["avg_rr"] == 2.0
    assert members[0]["missed_days"] == 6
    assert members[1]["missed_days"] == 7


def test_challenge_bonus_flow(client, teams, make_account, login_as, session):
    governor = make_account("gov", role="governor")
    player = make_account("asha", team=teams["alpha"])
    add_entry(session, player, date(2025, 10, 16))

    login_as(player)
    response = client.post("/api/challenges", json={
        "name": "Plank-off", "start_date": "2025-10-15", "end_date": "2025-10-20"
    })
    assert response.status_code == 403

    login_as(governor)
    response = client.post("/api/challenges", json={
        "name": "Plank-off", "start_date": "2025-10-15", "end_date": "2025-10-20"
    })
    assert response.status_code == 201
    challenge_id = response.json()["id"]

    response = client.put(f"/api/challenges/{challenge_id}/scores", json={"team_id": teams["alpha"].id, "score": 4})
    assert response.status_code == 200
    response = client.put(f"/api/challenges/{challenge_id}/scores", json={"team_id": teams["crusaders"].id, "score": None})
    assert response.json()["has_scores"] is True

    login_as(player)
    challenges = client.get("/api/challenges").json()
    assert challenges[0]["my_team_score"] == 4

    week1 = client.get("/api/leaderboard/teams", params={"period": "week-1"}).json()["standings"]
    alpha = next(row for row in week1 if row["entity_name"] == "Alpha")
    assert alpha["points"] == 5
    assert alpha["bonus"] == 4

    week2 = client.get("/api/leaderboard/teams", params={"period": "week-2"}).json()["standings"]
    alpha = next(row for row in week2 if row["entity_name"] == "Alpha")
    assert alpha["points"] == 0


def test_challenge_end_before_start(client, make_account, login_as):
    login_as(make_account("gov", role="governor"))
    response = client.post("/api/challenges", json={
        "name": "Backwards", "start_date": "2025-10-20", "end_date": "2025-10-15"
    })
    assert response.status_code == 400


def test_governor_overview_and_management(client, teams, make_account, login_as, session):
    governor = make_account("gov", role="governor")
    player = make_account("asha", team=teams["alpha"])
    add_entry(session, player, YESTERDAY, rr=1.2)
    add_entry(session, player, date(2025, 10, 20), kind="rest")

    login_as(player)
    assert client.get("/api/governor/overview").status_code == 403

    login_as(governor)
    data = client.get("/api/governor/overview").json()
    assert data["as_of"] == YESTERDAY.isoformat()
    assert [row["entity_name"] for row in data["teams"]] == ["Alpha", "Crusaders"]
    assert data["individuals"][0]["entity_name"] == "Asha"
    assert data["individuals"][0]["missed_days"] == 5
    assert data["total_rest_days"] == 1
    # Crusaders have no entries, so only Alpha counts toward the average
    assert data["league_avg_rr"] == 1.1
    assert data["individuals"][0]["rest_days"] == 1

    response = client.post("/api/governor/teams", json={"name": "Interstellar", "roster_size": 13})
    assert response.status_code == 201
    team_id = response.json()["id"]
    assert client.post("/api/governor/teams", json={"name": "Interstellar"}).status_code == 400

    response = client.patch(f"/api/governor/accounts/{player.id}", json={"team_id": team_id, "role": "leader"})
    assert response.status_code == 200
    assert response.json()["role"] == "leader"
    assert response.json()["team_id"] == team_id

    assert client.patch(f"/api/governor/accounts/{player.id}", json={"role": "emperor"}).status_code == 400


def test_league_average_rr_skips_teams_without_entries(teams, make_account, session):
    player = make_account("asha", team=teams["alpha"])
    add_entry(session, player, YESTERDAY, rr=2.0)

    overview = league_overview(session, YESTERDAY)
    assert overview["league_avg_rr"] == 2.0


def test_season_to_date_numbers_stop_at_season_end(teams, make_account, session):
    player = make_account("asha", team=teams["alpha"])

    # Long after the 90-day season has finished
    as_of = date(2026, 10, 15)
    assert member_dashboard(session, player, as_of)["missed_days"] == 90

    overview = league_overview(session, as_of)
    assert overview["individuals"][0]["missed_days"] == 90


def test_dashboard_team_matches_overall_team_page_after_season(client, teams, make_account, login_as, session):
    player = make_account("asha", team=teams["alpha"])
    add_entry(session, player, date(2025, 10, 20))
    app.dependency_overrides[get_clock] = lambda: Clock(fixed_today=date(2026, 10, 16))

    login_as(player)
    dashboard = client.get("/api/dashboard").json()
    team_page = client.get("/api/team", params={"period": "overall"}).json()

    assert dashboard["me"]["missed_days"] == 89
    assert dashboard["team"]["missed_days"] == 89
    assert dashboard["team"]["missed_days"] == team_page["missed_days"]
    assert dashboard["team"]["points"] == team_page["points"]


def test_overview_league_composition(client, teams, make_account, login_as):
    governor = make_account("gov", role="governor")
    make_account("asha", team=teams["alpha"], age=30, gender="Male")
    make_account("bea", role="leader", team=teams["alpha"], age=70, gender="F")
    make_account("cal", team=teams["crusaders"])
    make_account("dee", team=teams["crusaders"], age=85, gender="nonbinary")
    make_account("eli", team=teams["crusaders"], age=18, gender="female")

    login_as(governor)
    composition = client.get("/api/governor/overview").json()["composition"]

    assert composition["players"] == 5
    assert composition["teams"] == 2
    assert composition["genders"] == {"male": 1, "female": 2, "other": 1, "unknown": 1}
    assert composition["roles"] == {"player": 4, "leader": 1}
    assert composition["age_brackets"] == {
        "juniors": 1,
        "young_adults": 1,
        "adults": 0,
        "super_adults": 0,
        "seniors": 1,
        "super_seniors": 1,
    }


def test_duplicate_first_submission_is_a_conflict(teams, make_account, session, monkeypatch):
    player = make_account("asha", team=teams["alpha"])
    add_entry(session, player, TODAY, status="pending")
    # Simulate a concurrent request that read before the other one inserted
    monkeypatch.setattr("league.services.entries.get_entry_for_day", lambda db, user_id, day: None)

    with pytest.raises(EntryStateError, match="already submitted"):
        submit_entry(session, player, TODAY, "rest", Clock(fixed_today=TODAY))

    entries = session.exec(select(Entry).where(Entry.user_id == player.id)).all()
    assert len(entries) == 1
    assert entries[0].kind == "workout"


def test_governor_can_remove_member_from_team(client, teams, make_account, login_as):
    governor = make_account("gov", role="governor")
    player = make_account("asha", team=teams["alpha"])
    login_as(governor)

    response = client.patch(f"/api/governor/accounts/{player.id}", json={"role": "leader"})
    assert response.json()["team_id"] == teams["alpha"].id

    response = client.patch(f"/api/governor/accounts/{player.id}", json={"team_id": None})
    assert response.status_code == 200
    assert response.json()["team_id"] is None
    assert response.json()["role"] == "leader"

    response = client.patch(f"/api/governor/accounts/{player.id}", json={"team_id": 9999})
    assert response.status_code == 404
