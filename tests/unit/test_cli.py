"""
Unit tests for command-line helpers.
"""

import json

import pytest
from unittest.mock import MagicMock, Mock

import run_onlineschool
from onlineschool.models.result import Result
from onlineschool.utils.config import SecureString


class TestParseArguments:

    def test_lessons_list_filters(self):
        args = run_onlineschool.parse_arguments([
            "lessons", "list", "--status", "COMPLETED", "--from", "2026-02-01", "--export", "csv"
        ])

        assert args.command == "lessons"
        assert args.action == "list"
        assert args.status == "COMPLETED"
        assert args.date_from == "2026-02-01"
        assert args.date_to == ""
        assert args.export == "csv"

    def test_lessons_update_rejects_unknown_status(self):
        with pytest.raises(SystemExit):
            run_onlineschool.parse_arguments(["lessons", "update", "7", "DONE"])

    def test_homework_assign(self):
        args = run_onlineschool.parse_arguments([
            "homework", "assign", "--lesson", "12", "--homework", "3", "--due", "2026-03-01"
        ])

        assert (args.lesson_id, args.homework_id, args.due_date) == (12, 3, "2026-03-01")


class TestQuestionInput:

    def test_question_from_args(self):
        args = run_onlineschool.parse_arguments([
            "homework", "add-question", "3",
            "--text", "Past tense of 'go'", "--points", "2",
            "--option", "went", "--option", "goed", "--correct", "1"
        ])

        draft = run_onlineschool.question_from_args(args)

        assert draft.points == 2
        assert [o.is_correct for o in draft.options] == [True, False]

    def test_load_questions_single_and_list(self, tmp_path):
        single = tmp_path / "one.json"
        single.write_text(json.dumps(
            {"text": "Q", "options": [{"text": "a", "is_correct": True}, {"text": "b"}]}
        ), encoding="utf-8")
        many = tmp_path / "many.json"
        many.write_text(json.dumps([{"text": "Q1"}, {"text": "Q2"}]), encoding="utf-8")

        assert len(run_onlineschool.load_questions(single)) == 1
        assert [q.text for q in run_onlineschool.load_questions(many)] == ["Q1", "Q2"]

    def test_load_questions_rejects_non_object_items(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(["What is the past tense of go?"]), encoding="utf-8")

        with pytest.raises(ValueError, match="question 1 must be a JSON object"):
            run_onlineschool.load_questions(path)

    @pytest.mark.parametrize("content", ["42", "\"text\"", "[{\"text\": \"Q\", \"options\": [\"went\"]}]"])
    def test_load_questions_rejects_other_shapes(self, tmp_path, content):
        path = tmp_path / "bad.json"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ValueError):
            run_onlineschool.load_questions(path)

    def test_add_questions_stops_at_first_failure(self):
        add = Mock(side_effect=[Result.success(None), Result.failure("bad"), Result.success(None)])

        status = run_onlineschool.add_questions(add, [Mock(), Mock(), Mock()])

        assert status == 1
        assert add.call_count == 2


class TestAuthenticate:

    @pytest.fixture
    def config(self):
        config = Mock()
        config.username = "teacher1"
        config.password = SecureString("env-secret")
        config.access_token = SecureString("env.token")
        config.has_credentials = True
        return config

    def test_command_line_password_wins(self, config):
        args = Mock(username=None, password="cli-secret")
        session = Mock()

        run_onlineschool.authenticate(args, config, session)

        session.login.assert_called_once_with("teacher1", SecureString("cli-secret"))

    def test_env_password(self, config):
        session = Mock()

        run_onlineschool.authenticate(Mock(username=None, password=None), config, session)

        session.login.assert_called_once_with("teacher1", config.password)

    def test_token_fallback(self, config):
        config.username = None
        session = Mock()

        run_onlineschool.authenticate(Mock(username=None, password=None), config, session)

        session.use_token.assert_called_once_with(config.access_token)

    def test_no_credentials(self, config):
        config.username = None
        config.password = None
        config.access_token = None
        config.has_credentials = False

        result = run_onlineschool.authenticate(Mock(username=None, password=None), config, Mock())

        assert result.is_failure

    def test_username_without_any_secret(self, config):
        config.password = None
        config.access_token = None
        config.has_credentials = False
        session = Mock()

        result = run_onlineschool.authenticate(Mock(username="teacher1", password=None), config, session)

        assert result.is_failure
        session.use_token.assert_not_called()


def lesson_row(lesson_id, status):
    return {
        "lesson_id": lesson_id,
        "student_name": "Aziza Karimova",
        "student_phone": "+998901234567",
        "start_time": "2026-02-20T12:45:00Z",
        "end_time": "2026-02-20T13:35:00Z",
        "status": status,
        "credits_consumed": status == "COMPLETED",
        "teacher_rate_uzs": 90000,
        "payout_amount_uzs": 90000 if status == "COMPLETED" else 0,
        "payout_status": "PENDING",
    }


class TestLessonsUpdate:

    @pytest.fixture
    def prompt(self, monkeypatch):
        prompt = Mock(return_value="n")
        monkeypatch.setattr("builtins.input", prompt)
        return prompt

    def run(self, client, *argv):
        args = run_onlineschool.parse_arguments(["lessons", "update", *argv])
        return run_onlineschool.cmd_lessons_update(args, client, "Asia/Tashkent")

    def test_terminal_lesson_refused_before_prompt(self, prompt, capsys):
        client = Mock()
        client.get.return_value = Result.success([lesson_row(7, "COMPLETED")])

        status = self.run(client, "7", "PENDING")

        assert status == 1
        prompt.assert_not_called()
        client.patch.assert_not_called()
        assert "No status changes are allowed for a Completed lesson" in capsys.readouterr().out

    def test_disallowed_target_refused_before_prompt(self, prompt, capsys):
        client = Mock()
        client.get.return_value = Result.success([lesson_row(7, "PENDING")])

        status = self.run(client, "7", "CONFIRMED")

        assert status == 1
        prompt.assert_not_called()
        client.patch.assert_not_called()
        assert "Allowed:" in capsys.readouterr().out

    def test_allowed_target_prompts(self, prompt, capsys):
        client = Mock()
        client.get.return_value = Result.success([lesson_row(7, "PENDING")])

        status = self.run(client, "7", "CANCELLED")

        assert status == 0
        prompt.assert_called_once()
        client.patch.assert_not_called()
        out = capsys.readouterr().out
        assert "17:45-18:35" in out
        assert "Cancelled" in out


class TestMain:

    @pytest.fixture
    def config(self, tmp_path):
        config = Mock()
        config.output_dir = tmp_path
        config.log_level = "INFO"
        config.username = "teacher1"
        config.password = SecureString("env-secret")
        config.timezone = "Asia/Tashkent"
        config.request_timeout = None
        return config

    @pytest.fixture
    def session(self):
        user = Mock(timezone="Asia/Tashkent", display_name="Dilshod Rakhimov", role="teacher", email="d@example.com")
        session = Mock()
        session.login.return_value = Result.success(user)
        session.get_session_info.return_value = {"state": "logged_in"}
        return session

    @pytest.fixture
    def wired(self, monkeypatch, config, session):
        monkeypatch.setattr(run_onlineschool, "Config", Mock(return_value=config))
        monkeypatch.setattr(run_onlineschool, "setup_logger", Mock())
        monkeypatch.setattr(run_onlineschool, "ApiClient", MagicMock())
        monkeypatch.setattr(run_onlineschool, "AuthSession", Mock(return_value=session))

    def test_whoami_prepares_output_and_logs_out(self, wired, config, session, capsys):
        status = run_onlineschool.main(["whoami"])

        assert status == 0
        config.validate.assert_called_once()
        config.create_output_directories.assert_called_once()
        session.logout.assert_called_once()
        assert "Dilshod Rakhimov (teacher)" in capsys.readouterr().out

    def test_failed_login_exits_1(self, wired, session):
        session.login.return_value = Result.failure("No active account found with the given credentials")

        assert run_onlineschool.main(["whoami"]) == 1
        session.logout.assert_not_called()

    def test_bad_question_file_exits_1(self, wired, session, tmp_path, capsys):
        path = tmp_path / "questions.json"
        path.write_text(json.dumps(["not an object"]), encoding="utf-8")

        status = run_onlineschool.main(["homework", "create", "--title", "Past Simple", "--questions", str(path)])

        assert status == 1
        session.logout.assert_called_once()
        assert "must be a JSON object" in capsys.readouterr().out
