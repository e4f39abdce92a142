from collections.abc import AsyncIterator, Callable

import gradio as gr

from app.core.errors import InvalidTransitionError
from app.core.models import AnalysisRequest, AppState, View
from app.services.composer import has_submittable_input
from app.services.media import select_images
from app.services.report_pdf import export_report_pdf
from app.services.session import AUTH_VIEWS, get_triage_session
from app.services.stt import append_voice_segment, get_stt_provider
from app.ui.report import (
    format_error_banner,
    render_feature_cards,
    render_overview,
    render_patient_summary,
    render_radar_card,
    render_red_flags,
    render_soap_note,
)
from config.logger import logger

session = get_triage_session()
stt = get_stt_provider()

TOGGLE_DARK_JS = "() => { document.body.classList.toggle('dark'); }"
# Receives the view reached by the analysis; only a successful run scrolls
SCROLL_TO_RESULTS_JS = "(view) => { if (view === 'results') { window.scrollTo({ top: 0, behavior: 'smooth' }); } }"


def format_greeting(user_email: str | None) -> str:
    name = user_email.split("@")[0] if user_email else ""
    return (
        f"## Hello, {name or 'Patient'}\n"
        "Ready for your AI health assessment? Describe your symptoms below."
    )


def analyze_button_update(state: AppState, symptoms: str = "", images: list | None = None) -> dict:
    if state.analyzing:
        return gr.update(value="⏳ ANALYZING...", interactive=False)
    has_input = bool((symptoms or "").strip()) or bool(images)
    return gr.update(value="🩺 INITIATE ANALYSIS", interactive=has_input)


def render_views(state: AppState) -> tuple:
    """Visibility and header updates derived from the current view."""
    is_auth = state.view in AUTH_VIEWS
    is_signup = state.view == View.SIGNUP
    authenticated = state.view in (View.DASHBOARD, View.RESULTS)
    return (
        gr.update(visible=state.view == View.LANDING),
        gr.update(visible=is_auth),
        gr.update(visible=state.view == View.DASHBOARD),
        gr.update(visible=state.view == View.RESULTS),
        gr.update(visible=authenticated),
        gr.update(value=f"👤 {state.user_email}" if state.user_email else ""),
        gr.update(value="## Create Account" if is_signup else "## Welcome Back"),
        gr.update(visible=is_signup),
        gr.update(value="Sign Up →" if is_signup else "Sign In →"),
        gr.update(value="Already have an account? Log In" if is_signup else "Don't have an account? Sign Up"),
        gr.update(value=format_greeting(state.user_email)),
        format_error_banner(state.error),
    )


def render_results(state: AppState) -> tuple:
    result = state.result
    if result is None:
        return ("", "", "", "", "", "")
    return (
        render_overview(result, state.report_id or ""),
        render_radar_card(result.health_radar),
        render_red_flags(result.red_flags),
        render_feature_cards(result),
        render_patient_summary(result),
        render_soap_note(result),
    )


def _apply(transition: Callable[[AppState], AppState]) -> Callable[[AppState], tuple]:
    def handler(state: AppState) -> tuple:
        try:
            state = transition(state)
        except InvalidTransitionError as e:
            logger.warning(f"Ignored transition: {e}")
        return (state, *render_views(state))

    return handler


def submit_credentials(state: AppState, email: str, password: str) -> tuple:
    try:
        state = session.submit_credentials(state, email, password)
    except InvalidTransitionError as e:
        logger.warning(f"Ignored credentials submission: {e}")
    return (state, *render_views(state))


async def run_analysis(
    state: AppState,
    symptoms: str,
    history: str,
    voice_transcript: str,
    images: list | None,
) -> AsyncIterator[tuple]:
    request = AnalysisRequest(
        symptoms=symptoms or "",
        history=history or "",
        voice_transcript=voice_transcript or "",
        images=select_images(images),
    )

    if state.analyzing or not has_submittable_input(
        request.symptoms, request.voice_transcript, len(request.images)
    ):
        logger.info("Analysis not started: nothing to submit or already running")
        yield (state, state.view.value, *render_views(state), analyze_button_update(state, symptoms, images), *render_results(state))
        return

    session.begin_analysis(state)
    yield (state, state.view.value, *render_views(state), analyze_button_update(state), *render_results(state))

    await session.execute_analysis(state, request)
    yield (state, state.view.value, *render_views(state), analyze_button_update(state, symptoms, images), *render_results(state))


async def on_voice_segment(audio_path: str | None, symptoms: str, voice_transcript: str) -> tuple:
    if not audio_path:
        return symptoms, voice_transcript, None
    try:
        segment = await stt.transcribe_raw(audio_path)
    except Exception as e:
        logger.error(f"Error transcribing voice note: {e}")
        return symptoms, voice_transcript, None

    symptoms, voice_transcript = append_voice_segment(symptoms or "", voice_transcript or "", segment)
    return symptoms, voice_transcript, None


def on_images_selected(images: list | None) -> list[str]:
    return [img.file_path for img in select_images(images)]


def on_export_pdf(state: AppState) -> dict:
    if state.result is None:
        logger.warning("PDF export requested without a result")
        return gr.update(value=None, visible=False)
    path = export_report_pdf(state.result, state.report_id or "report")
    return gr.update(value=path, visible=True)


def clear_form() -> tuple:
    return "", "", "", None, None, gr.update(value=None, visible=False)


def create_app() -> gr.Blocks:
    with gr.Blocks(title="NeuroScanX") as app:
        gr.HTML("<style>footer {visibility: hidden}</style>")

        app_state = gr.State(AppState())
        view_marker = gr.Textbox(visible=False)
        voice_state = gr.State("")

        # Header (authenticated views only)
        with gr.Row(visible=False) as header_row:
            with gr.Column(scale=4):
                gr.Markdown("## 🧠 NeuroScan**X**  \nNext-Gen Triage")
            with gr.Column(scale=2):
                user_label = gr.Markdown("")
            with gr.Column(scale=1, min_width=80):
                header_theme_btn = gr.Button("🌓 Theme", size="sm", variant="secondary")
            with gr.Column(scale=1, min_width=80):
                logout_btn = gr.Button("⏻ Logout", size="sm", variant="stop")

        # Landing
        with gr.Column(visible=True) as landing_view:
            gr.Markdown(
                "# 🧠 NeuroScanX\n"
                "### Multimodal AI health triage\n"
                "Describe your symptoms, add a timeline, speak a voice note and upload up to two photos. "
                "NeuroScanX returns a triage level, a clinician-grade SOAP note and a health radar."
            )
            with gr.Row():
                landing_login_btn = gr.Button("Log In", variant="secondary", size="lg")
                landing_signup_btn = gr.Button("Get Started", variant="primary", size="lg")
                landing_theme_btn = gr.Button("🌓 Theme", variant="secondary", size="lg")

        # Login / Signup
        with gr.Column(visible=False) as auth_view:
            auth_back_btn = gr.Button("← Back to Home", size="sm", variant="secondary")
            auth_title = gr.Markdown("## Welcome Back")
            name_input = gr.Textbox(label="Full Name", placeholder="John Doe", visible=False)
            email_input = gr.Textbox(label="Email Address", placeholder="name@example.com")
            password_input = gr.Textbox(label="Password", type="password", placeholder="••••••••")
            auth_submit_btn = gr.Button("Sign In →", variant="primary", size="lg")
            auth_switch_btn = gr.Button("Don't have an account? Sign Up", size="sm", variant="secondary")

        # Dashboard (input)
        with gr.Column(visible=False) as dashboard_view:
            greeting = gr.Markdown(format_greeting(None))
            error_banner = gr.HTML("")
            symptoms_input = gr.Textbox(
                label="Primary Symptoms",
                placeholder="Describe what you feel, or record a voice note below...",
                lines=5,
            )
            voice_input = gr.Audio(
                sources=["microphone"],
                type="filepath",
                label="🎙️ Voice Note (each recording is appended to your symptoms)",
            )
            history_input = gr.Textbox(
                label="Timeline / History",
                placeholder="e.g., Day 1: Mild fever. Day 3: Rash appeared...",
                lines=3,
            )
            images_input = gr.File(
                file_count="multiple",
                file_types=["image"],
                label="📷 Visual Data (Max 2): first = Primary, second = Comparison",
                type="filepath",
            )
            gr.Markdown("*Upload 2 images to enable Comparison Mode. Upload pills for Safe ID.*")
            analyze_btn = gr.Button("🩺 INITIATE ANALYSIS", variant="primary", size="lg", interactive=False)

        # Results
        with gr.Column(visible=False) as results_view:
            return_btn = gr.Button("← Return to Input", size="sm", variant="secondary")
            with gr.Row():
                with gr.Column(scale=2):
                    overview_output = gr.HTML("")
                with gr.Column(scale=1):
                    radar_output = gr.HTML("")
            red_flags_output = gr.HTML("")
            features_output = gr.HTML("")
            with gr.Tabs():
                with gr.Tab("👤 Patient Summary"):
                    patient_output = gr.HTML("")
                with gr.Tab("📋 Clinician SOAP Note"):
                    soap_output = gr.HTML("")
            with gr.Row():
                pdf_btn = gr.Button("⬇️ Download Clinical PDF", variant="primary")
            pdf_file = gr.File(label="Clinical PDF", visible=False, interactive=False)

        gr.Markdown(
            "<center><small>NeuroScanX System • AI Support Tool • "
            "<b style='color: #ef4444;'>Emergency? Call 911</b></small></center>"
        )

        # Actions
        view_outputs = [
            landing_view,
            auth_view,
            dashboard_view,
            results_view,
            header_row,
            user_label,
            auth_title,
            name_input,
            auth_submit_btn,
            auth_switch_btn,
            greeting,
            error_banner,
        ]
        result_outputs = [
            overview_output,
            radar_output,
            red_flags_output,
            features_output,
            patient_output,
            soap_output,
        ]
        form_outputs = [symptoms_input, history_input, voice_state, voice_input, images_input, pdf_file]

        app.load(fn=None, js="() => { document.body.classList.add('dark'); }")

        landing_login_btn.click(
            fn=_apply(session.open_login), inputs=[app_state], outputs=[app_state] + view_outputs
        )
        landing_signup_btn.click(
            fn=_apply(session.open_signup), inputs=[app_state], outputs=[app_state] + view_outputs
        )
        auth_switch_btn.click(
            fn=_apply(session.switch_auth_mode), inputs=[app_state], outputs=[app_state] + view_outputs
        )
        auth_back_btn.click(
            fn=_apply(session.back_to_landing), inputs=[app_state], outputs=[app_state] + view_outputs
        )
        auth_submit_btn.click(
            fn=submit_credentials,
            inputs=[app_state, email_input, password_input],
            outputs=[app_state] + view_outputs,
        )

        for theme_btn in (landing_theme_btn, header_theme_btn):
            theme_btn.click(
                fn=_apply(session.toggle_theme), inputs=[app_state], outputs=[app_state] + view_outputs
            ).then(fn=None, js=TOGGLE_DARK_JS)

        logout_btn.click(
            fn=_apply(session.logout), inputs=[app_state], outputs=[app_state] + view_outputs
        ).then(fn=clear_form, outputs=form_outputs)

        return_btn.click(
            fn=_apply(session.return_to_input), inputs=[app_state], outputs=[app_state] + view_outputs
        ).then(fn=clear_form, outputs=form_outputs).then(
            fn=lambda state: analyze_button_update(state), inputs=[app_state], outputs=[analyze_btn]
        )

        symptoms_input.change(
            fn=analyze_button_update,
            inputs=[app_state, symptoms_input, images_input],
            outputs=[analyze_btn],
        )
        images_input.upload(fn=on_images_selected, inputs=[images_input], outputs=[images_input]).then(
            fn=analyze_button_update,
            inputs=[app_state, symptoms_input, images_input],
            outputs=[analyze_btn],
        )
        images_input.clear(
            fn=analyze_button_update,
            inputs=[app_state, symptoms_input, images_input],
            outputs=[analyze_btn],
        )
        voice_input.stop_recording(
            fn=on_voice_segment,
            inputs=[voice_input, symptoms_input, voice_state],
            outputs=[symptoms_input, voice_state, voice_input],
        )

        analyze_btn.click(
            fn=run_analysis,
            inputs=[app_state, symptoms_input, history_input, voice_state, images_input],
            outputs=[app_state, view_marker] + view_outputs + [analyze_btn] + result_outputs,
        ).then(fn=None, inputs=[view_marker], js=SCROLL_TO_RESULTS_JS)

        pdf_btn.click(
            fn=on_export_pdf,
            inputs=[app_state],
            outputs=[pdf_file],
            show_progress="full",
        )

    return app
