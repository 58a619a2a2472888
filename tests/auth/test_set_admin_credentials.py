from set_admin_credentials import set_admin_credentials


def test_sets_password_and_username(app, capsys):
    assert set_admin_credentials("new.admin", "shell-password", app=app)
    credentials = app.extensions["credentials"]
    assert credentials.authenticate("new.admin", "shell-password") == "new.admin"
    assert "admin -> new.admin" in capsys.readouterr().out


def test_rejects_short_password(app, capsys):
    assert not set_admin_credentials(password="short", app=app)
    assert app.extensions["credentials"].verify_password("correct-horse")
    assert "at least 8 characters" in capsys.readouterr().out
