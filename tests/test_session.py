"""Tests for the view state machine and the analysis cycle."""

import asyncio

import pytest

from app.core.errors import ConfigurationError, InvalidTransitionError
from app.core.models import AnalysisRequest, AppState, ImageAttachment, View
from app.services.mapper import parse_analysis_response
from app.services.session import ANALYSIS_ERROR_PREFIX, format_analysis_error


class TestAuthFlow:
    def test_landing_to_login_and_signup(self, make_session, fake_llm):
        session = make_session(fake_llm)
        state = AppState()
        assert session.open_login(state).view == View.LOGIN
        assert session.switch_auth_mode(state).view == View.SIGNUP
        assert session.switch_auth_mode(state).view == View.LOGIN
        assert session.back_to_landing(state).view == View.LANDING
        assert session.open_signup(state).view == View.SIGNUP

    def test_valid_credentials_reach_dashboard(self, make_session, fake_llm):
        session = make_session(fake_llm)
        state = session.open_login(AppState())
        session.submit_credentials(state, " jane@example.com ", "secret")
        assert state.view == View.DASHBOARD
        assert state.user_email == "jane@example.com"

    @pytest.mark.parametrize("email, password", [("", "secret"), ("jane@example.com", ""), ("  ", "x")])
    def test_rejected_credentials_change_nothing(self, make_session, fake_llm, email, password):
        session = make_session(fake_llm)
        state = session.open_signup(AppState())
        before = state.model_copy()
        session.submit_credentials(state, email, password)
        assert state == before

    def test_illegal_transitions_raise(self, make_session, fake_llm, dashboard_state):
        session = make_session(fake_llm)
        with pytest.raises(InvalidTransitionError):
            session.return_to_input(dashboard_state)
        with pytest.raises(InvalidTransitionError):
            session.logout(AppState())
        with pytest.raises(InvalidTransitionError):
            session.begin_analysis(AppState(view=View.LOGIN))

    def test_toggle_theme_from_any_view(self, make_session, fake_llm):
        session = make_session(fake_llm)
        state = AppState()
        assert state.is_dark is True
        assert session.toggle_theme(state).is_dark is False
        state.view = View.RESULTS
        assert session.toggle_theme(state).is_dark is True


class TestAnalyze:
    def test_empty_input_is_a_no_op(self, make_session, fake_llm, dashboard_state):
        session = make_session(fake_llm)
        before = dashboard_state.model_copy()

        submitted = asyncio.run(session.analyze(dashboard_state, AnalysisRequest(symptoms="  ", history="Day 1")))

        assert submitted is False
        assert fake_llm.calls == 0
        assert dashboard_state == before

    def test_success_shows_exact_result(self, make_session, fake_llm, dashboard_state, reply_text):
        session = make_session(fake_llm)

        submitted = asyncio.run(session.analyze(dashboard_state, AnalysisRequest(symptoms="fever and rash")))

        assert submitted is True
        assert fake_llm.calls == 1
        assert dashboard_state.view == View.RESULTS
        assert dashboard_state.analyzing is False
        assert dashboard_state.error is None
        assert dashboard_state.result == parse_analysis_response(reply_text)

    def test_voice_only_and_image_only_are_submittable(self, make_session, fake_llm, image_files):
        session = make_session(fake_llm)
        voice_state = AppState(view=View.DASHBOARD)
        image_state = AppState(view=View.DASHBOARD)

        asyncio.run(session.analyze(voice_state, AnalysisRequest(voice_transcript="my head hurts")))
        asyncio.run(
            session.analyze(image_state, AnalysisRequest(images=[ImageAttachment(file_path=image_files[0])]))
        )

        assert fake_llm.calls == 2
        assert voice_state.view == View.RESULTS
        assert image_state.view == View.RESULTS

    def test_only_first_two_images_are_sent(self, make_session, fake_llm, dashboard_state, image_files):
        session = make_session(fake_llm)
        request = AnalysisRequest(
            symptoms="bruise",
            history="Day 1 vs Day 3",
            images=[ImageAttachment(file_path=p) for p in image_files],
        )

        asyncio.run(session.analyze(dashboard_state, request))

        parts = fake_llm.payloads[0].parts
        assert [p["type"] for p in parts] == ["input_image", "input_image", "input_text"]
        assert parts[0]["image_url"].startswith("data:image/png;base64,")
        assert parts[1]["image_url"].startswith("data:image/jpeg;base64,")
        assert "bruise" in parts[2]["text"]
        assert "Day 1 vs Day 3" in parts[2]["text"]

    @pytest.mark.parametrize("reply", ["not json at all", "", None, '{"chiefComplaint": "x"}'])
    def test_bad_reply_stays_on_dashboard_with_error(self, make_session, make_llm, dashboard_state, reply):
        session = make_session(make_llm(reply=reply))

        asyncio.run(session.analyze(dashboard_state, AnalysisRequest(symptoms="cough")))

        assert dashboard_state.view == View.DASHBOARD
        assert dashboard_state.analyzing is False
        assert dashboard_state.result is None
        assert dashboard_state.error.startswith(ANALYSIS_ERROR_PREFIX)

    def test_provider_error_is_reported(self, make_session, make_llm, dashboard_state):
        llm = make_llm(error=ConfigurationError("OPENAI_API_KEY is not configured."))
        session = make_session(llm)

        asyncio.run(session.analyze(dashboard_state, AnalysisRequest(symptoms="cough")))

        assert dashboard_state.error == f"{ANALYSIS_ERROR_PREFIX} OPENAI_API_KEY is not configured."

    def test_unreadable_image_is_reported(self, make_session, fake_llm, dashboard_state, tmp_path):
        session = make_session(fake_llm)
        request = AnalysisRequest(images=[ImageAttachment(file_path=str(tmp_path / "missing.png"))])

        asyncio.run(session.analyze(dashboard_state, request))

        assert fake_llm.calls == 0
        assert dashboard_state.view == View.DASHBOARD
        assert "missing.png" in dashboard_state.error

    def test_new_analysis_clears_previous_error(self, make_session, make_llm, dashboard_state, reply_text):
        dashboard_state.error = f"{ANALYSIS_ERROR_PREFIX} boom"
        session = make_session(make_llm(reply=reply_text))

        session.begin_analysis(dashboard_state)

        assert dashboard_state.analyzing is True
        assert dashboard_state.error is None

    def test_second_start_while_analyzing_is_rejected(self, make_session, fake_llm, dashboard_state):
        session = make_session(fake_llm)
        session.begin_analysis(dashboard_state)
        with pytest.raises(InvalidTransitionError):
            session.begin_analysis(dashboard_state)

    def test_return_to_input_drops_result(self, make_session, fake_llm, dashboard_state):
        session = make_session(fake_llm)
        asyncio.run(session.analyze(dashboard_state, AnalysisRequest(symptoms="fever")))

        session.return_to_input(dashboard_state)

        assert dashboard_state.view == View.DASHBOARD
        assert dashboard_state.result is None

    def test_each_cycle_gets_a_fresh_report_id(self, make_session, fake_llm, dashboard_state):
        session = make_session(fake_llm)
        asyncio.run(session.analyze(dashboard_state, AnalysisRequest(symptoms="fever")))
        first = dashboard_state.report_id
        session.return_to_input(dashboard_state)
        assert dashboard_state.report_id is None

        asyncio.run(session.analyze(dashboard_state, AnalysisRequest(symptoms="fever")))

        assert first and dashboard_state.report_id
        assert dashboard_state.report_id != first


class TestLogout:
    def test_logout_from_results_clears_session(self, make_session, fake_llm, dashboard_state):
        session = make_session(fake_llm)
        asyncio.run(session.analyze(dashboard_state, AnalysisRequest(symptoms="fever")))
        assert dashboard_state.view == View.RESULTS

        session.logout(dashboard_state)

        assert dashboard_state.view == View.LANDING
        assert dashboard_state.user_email is None
        assert dashboard_state.result is None

    def test_result_arriving_after_logout_is_discarded(self, make_session, make_llm, dashboard_state, reply_text):
        holder = {}
        llm = make_llm(reply=reply_text, on_call=lambda: holder["session"].logout(dashboard_state))
        session = make_session(llm)
        holder["session"] = session

        asyncio.run(session.analyze(dashboard_state, AnalysisRequest(symptoms="fever")))

        assert dashboard_state.view == View.LANDING
        assert dashboard_state.result is None
        assert dashboard_state.analyzing is False
        assert dashboard_state.error is None

    def test_failure_arriving_after_logout_is_discarded(self, make_session, make_llm, dashboard_state):
        holder = {}
        llm = make_llm(reply="garbage", on_call=lambda: holder["session"].logout(dashboard_state))
        session = make_session(llm)
        holder["session"] = session

        asyncio.run(session.analyze(dashboard_state, AnalysisRequest(symptoms="fever")))

        assert dashboard_state.view == View.LANDING
        assert dashboard_state.error is None

    def test_stale_result_does_not_land_in_a_newer_cycle(self, make_session, make_llm, dashboard_state, reply_text):
        holder = {}

        def relogin_and_restart():
            session = holder["session"]
            session.logout(dashboard_state)
            session.open_login(dashboard_state)
            session.submit_credentials(dashboard_state, "jane@example.com", "secret")
            session.begin_analysis(dashboard_state)
            holder["second_id"] = dashboard_state.report_id

        session = make_session(make_llm(reply=reply_text, on_call=relogin_and_restart))
        holder["session"] = session

        asyncio.run(session.analyze(dashboard_state, AnalysisRequest(symptoms="fever")))

        assert dashboard_state.view == View.DASHBOARD
        assert dashboard_state.analyzing is True
        assert dashboard_state.result is None
        assert dashboard_state.report_id == holder["second_id"]

    def test_stale_failure_does_not_end_a_newer_cycle(self, make_session, make_llm, dashboard_state):
        holder = {}

        def restart():
            session = holder["session"]
            session.logout(dashboard_state)
            session.open_login(dashboard_state)
            session.submit_credentials(dashboard_state, "jane@example.com", "secret")
            session.begin_analysis(dashboard_state)

        session = make_session(make_llm(error=RuntimeError("timeout"), on_call=restart))
        holder["session"] = session

        asyncio.run(session.analyze(dashboard_state, AnalysisRequest(symptoms="fever")))

        assert dashboard_state.analyzing is True
        assert dashboard_state.error is None


class TestErrorMessage:
    def test_prefix_with_detail(self):
        assert format_analysis_error(ValueError("bad")) == f"{ANALYSIS_ERROR_PREFIX} bad"

    def test_prefix_only_when_no_detail(self):
        assert format_analysis_error(RuntimeError()) == ANALYSIS_ERROR_PREFIX
