from safethrough.session import Session, current_session, reset_session


def test_code_round_trip():
    session = Session()
    session.set_code("app", "abc")
    assert session.get_code("app") == "abc"


def test_missing_code_is_empty():
    assert Session().get_code("app") == ""


def test_code_overwritten():
    session = Session()
    session.set_code("app", "first")
    session.set_code("app", "second")
    assert session.get_code("app") == "second"
    assert list(session.codes) == ["app"]


def test_bare_user_strips_domain_and_resource():
    session = Session(jid="alice@example.com/safe")
    assert session.bare_user() == "alice"


def test_bare_user_without_domain():
    session = Session(jid="bob")
    assert session.bare_user() == "bob"


def test_current_session_is_shared():
    reset_session()
    first = current_session()
    first.set_code("app", "xyz")
    assert current_session() is first
    assert current_session().get_code("app") == "xyz"


def test_reset_session_replaces_state():
    current_session().set_code("app", "xyz")
    fresh = reset_session()
    assert current_session() is fresh
    assert fresh.get_code("app") == ""


def test_sessions_do_not_share_codes():
    a = Session()
    b = Session()
    a.set_code("app", "only-a")
    assert b.get_code("app") == ""