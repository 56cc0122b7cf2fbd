"""
ForkYes - Prompt Logger.

Dumps every completion call (messages, sampling budget, raw reply or error)
into prompt_logs/<session>/NNN-<request_type>.md so a bad suggestion can be
traced back to the exact prompt that produced it.

Off by default. Turn it on with FORKYES_LOG_PROMPTS=1 or --log-prompts.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

LOG_PROMPTS = os.getenv("FORKYES_LOG_PROMPTS", "0") == "1"
LOG_DIR = Path("prompt_logs")


@dataclass
class _Session:
    started: str = field(default_factory=lambda: datetime.now().strftime("%Y%m%d_%H%M%S"))
    calls: int = 0


_session = _Session()


def enable_prompt_logging(enabled: bool = True) -> None:
    global LOG_PROMPTS
    LOG_PROMPTS = enabled


def reset_session() -> None:
    """Begin a fresh session directory and restart numbering."""
    global _session
    _session = _Session()


def _session_dir() -> Path:
    path = LOG_DIR / _session.started
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_session_log_dir() -> Path | None:
    return _session_dir() if LOG_PROMPTS else None


def _render(
    request_type: str,
    model: str,
    messages: list[dict[str, str]],
    temperature: float,
    max_tokens: int,
    response: str | None,
    error: str | None,
) -> str:
    lines = [
        f"# Completion: {request_type}",
        "",
        f"- **Model:** {model}",
        f"- **Temperature:** {temperature}",
        f"- **Max tokens:** {max_tokens}",
        f"- **Logged at:** {datetime.now().isoformat(timespec='seconds')}",
    ]
    for message in messages:
        lines += ["", f"## {message['role'].capitalize()}", "", "```", message["content"], "```"]

    lines += ["", "## Reply", ""]
    if error:
        lines.append(f"**ERROR:** {error}")
    elif response:
        lines += ["```", response, "```"]
    else:
        lines.append("_empty_")
    return "\n".join(lines) + "\n"


def log_prompt(
    *,
    request_type: str,
    model: str,
    messages: list[dict[str, str]],
    temperature: float,
    max_tokens: int,
    response: str | None = None,
    error: str | None = None,
) -> Path | None:
    """
    Record one completion call.

    Returns the written file, or None while logging is off.
    """
    if not LOG_PROMPTS:
        return None

    _session.calls += 1
    path = _session_dir() / f"{_session.calls:03d}-{request_type}.md"
    path.write_text(
        _render(request_type, model, messages, temperature, max_tokens, response, error),
        encoding="utf-8",
    )
    return path
