"""View state machine for one browser session.

All mutations of ``AppState`` go through the transitions below. The session
object itself is stateless and shared; the state lives in the tab.
"""

import uuid

from app.core.errors import InvalidTransitionError
from app.core.interfaces import AuthProvider
from app.core.models import AnalysisRequest, AnalysisResult, AppState, View
from app.services.analysis import TriageAnalysisService, get_analysis_service
from app.services.auth import get_auth_provider
from app.services.composer import has_submittable_input
from config.logger import logger

ANALYSIS_ERROR_PREFIX = "Unable to complete analysis."

AUTH_VIEWS = (View.LOGIN, View.SIGNUP)
AUTHENTICATED_VIEWS = (View.DASHBOARD, View.RESULTS)


def _require(state: AppState, allowed: tuple[View, ...], action: str) -> None:
    if state.view not in allowed:
        raise InvalidTransitionError(f"Cannot {action} from view '{state.view.value}'")


def new_report_id() -> str:
    return uuid.uuid4().hex[:9].upper()


def format_analysis_error(exc: Exception) -> str:
    detail = str(exc).strip()
    return f"{ANALYSIS_ERROR_PREFIX} {detail}" if detail else ANALYSIS_ERROR_PREFIX


class TriageSession:
    def __init__(
        self,
        analysis: TriageAnalysisService | None = None,
        auth: AuthProvider | None = None,
    ) -> None:
        self._analysis = analysis or get_analysis_service()
        self._auth = auth or get_auth_provider()

    # Landing and auth

    def open_login(self, state: AppState) -> AppState:
        _require(state, (View.LANDING, *AUTH_VIEWS), "open login")
        state.view = View.LOGIN
        return state

    def open_signup(self, state: AppState) -> AppState:
        _require(state, (View.LANDING, *AUTH_VIEWS), "open signup")
        state.view = View.SIGNUP
        return state

    def switch_auth_mode(self, state: AppState) -> AppState:
        _require(state, AUTH_VIEWS, "switch auth mode")
        state.view = View.SIGNUP if state.view == View.LOGIN else View.LOGIN
        return state

    def back_to_landing(self, state: AppState) -> AppState:
        _require(state, AUTH_VIEWS, "go back to landing")
        state.view = View.LANDING
        return state

    def submit_credentials(self, state: AppState, email: str, password: str) -> AppState:
        """Moves to the dashboard on success; a rejected submission changes nothing."""
        _require(state, AUTH_VIEWS, "submit credentials")
        identity = self._auth.verify(email, password)
        if identity is None:
            return state

        state.user_email = identity
        state.view = View.DASHBOARD
        logger.info(f"Session authenticated as {identity}")
        return state

    def logout(self, state: AppState) -> AppState:
        _require(state, AUTHENTICATED_VIEWS, "log out")
        logger.info(f"Logging out {state.user_email}")
        state.user_email = None
        state.result = None
        state.error = None
        state.analyzing = False
        state.report_id = None
        state.view = View.LANDING
        return state

    def toggle_theme(self, state: AppState) -> AppState:
        state.is_dark = not state.is_dark
        return state

    # Analysis

    def begin_analysis(self, state: AppState) -> AppState:
        """Starts a new cycle tagged with a fresh report id."""
        _require(state, (View.DASHBOARD,), "start an analysis")
        if state.analyzing:
            raise InvalidTransitionError("An analysis is already in progress")
        state.analyzing = True
        state.error = None
        state.result = None
        state.report_id = new_report_id()
        return state

    def _is_current(self, state: AppState, report_id: str) -> bool:
        return state.analyzing and state.view == View.DASHBOARD and state.report_id == report_id

    def complete_analysis(self, state: AppState, result: AnalysisResult, report_id: str) -> AppState:
        if not self._is_current(state, report_id):
            logger.warning(f"Discarding result of analysis {report_id}: no longer the active cycle")
            return state
        state.analyzing = False
        state.result = result
        state.view = View.RESULTS
        return state

    def fail_analysis(self, state: AppState, exc: Exception, report_id: str) -> AppState:
        if not self._is_current(state, report_id):
            logger.warning(f"Discarding failure of analysis {report_id}: no longer the active cycle ({exc})")
            return state
        state.analyzing = False
        state.error = format_analysis_error(exc)
        return state

    async def execute_analysis(self, state: AppState, request: AnalysisRequest) -> AppState:
        """Runs the model call for an analysis started with `begin_analysis`."""
        report_id = state.report_id
        try:
            result = await self._analysis.analyze(request)
        except Exception as e:
            logger.exception(f"Analysis {report_id} failed: {e}")
            return self.fail_analysis(state, e, report_id)
        return self.complete_analysis(state, result, report_id)

    async def analyze(self, state: AppState, request: AnalysisRequest) -> bool:
        """Full submission cycle. Returns False when the input was rejected and nothing was sent."""
        if not has_submittable_input(request.symptoms, request.voice_transcript, len(request.images)):
            logger.info("Submission ignored: no symptoms, voice transcript or images")
            return False

        self.begin_analysis(state)
        await self.execute_analysis(state, request)
        return True

    def return_to_input(self, state: AppState) -> AppState:
        _require(state, (View.RESULTS,), "return to input")
        state.result = None
        state.report_id = None
        state.view = View.DASHBOARD
        return state


def get_triage_session() -> TriageSession:
    return TriageSession()
