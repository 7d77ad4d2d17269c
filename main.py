"""
LiveKit voice agent entry point.

Configures the STT -> LLM -> TTS pipeline and launches the scheduler
agent. Also serves the booking HTTP API, or runs the offline console demo.

Usage:
    Live voice:   python main.py dev
    HTTP API:     python main.py serve
    Console mode: python main.py console
"""

import logging
import sys

from bay_scheduler.config import settings

logger = logging.getLogger(__name__)


def _build_session():
    """Build a new AgentSession with the configured STT/LLM/TTS pipeline."""
    from livekit.agents import AgentSession
    from livekit.plugins import cartesia, deepgram, openai, silero

    from bay_scheduler.schemas.session_schema import CallSession

    return AgentSession[CallSession](
        stt=deepgram.STT(
            model=settings.model.stt_model,
            language=settings.model.stt_language,
        ),
        llm=openai.LLM(model=settings.model.llm_model),
        tts=cartesia.TTS(
            model=settings.model.tts_model,
            voice=settings.model.tts_voice_id,
        ),
        vad=silero.VAD.load(),
        userdata=CallSession(),
    )


def prewarm(proc) -> None:
    """Build the shared scheduling core before the first call arrives."""
    from bay_scheduler.app_factory import get_shared_adapter

    get_shared_adapter(settings)


async def entrypoint(ctx) -> None:
    """LiveKit agent entrypoint. Must be module-level for Windows pickling."""
    from bay_scheduler.agents import SchedulerAgent
    from bay_scheduler.app_factory import build_catalog, get_shared_adapter
    from bay_scheduler.logging_context import set_session_id
    from bay_scheduler.prompts.system_prompts import build_scheduler_prompt

    set_session_id(f"CALL-{ctx.room.name}")
    adapter = get_shared_adapter(settings)
    instructions = build_scheduler_prompt(settings.business, build_catalog(settings))

    session = _build_session()
    session.userdata.call_id = ctx.room.name
    await session.start(room=ctx.room, agent=SchedulerAgent(adapter, instructions))
    logger.info("Voice agent session started in room: %s", ctx.room.name)


def _run_voice_mode() -> None:
    """Start the full LiveKit voice pipeline (requires API keys)."""
    from livekit.agents import JobExecutorType, WorkerOptions, cli

    # The in-memory calendar lives in one process, so calls must share it.
    executor = (
        JobExecutorType.THREAD if settings.google.backend == "memory" else JobExecutorType.PROCESS
    )
    worker = WorkerOptions(
        entrypoint_fnc=entrypoint,
        prewarm_fnc=prewarm,
        agent_name=settings.agent_name,
        job_executor_type=executor,
    )
    cli.run_app(worker)


def _run_api() -> None:
    import uvicorn

    from bay_scheduler.api import create_app

    uvicorn.run(create_app(), host=settings.host, port=settings.port)


def _run_console_mode() -> None:
    """Run the offline console demo (no API keys required)."""
    from console_demo import run_demo

    run_demo()


if __name__ == "__main__":
    mode = sys.argv[1] if len(sys.argv) > 1 else ""
    if mode == "console":
        _run_console_mode()
    elif mode == "serve":
        _run_api()
    else:
        _run_voice_mode()
