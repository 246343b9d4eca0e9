from __future__ import annotations

from dataclasses import dataclass

from autogen import ConversableAgent

from wordtail.agents.autogen_config import llm_config_from_env
from wordtail.agents.base import OracleError, OracleReply
from wordtail.api.models import OracleSession


def _extract_reply_text(reply: object) -> str:
    """Extract the text of an AG2 `generate_reply` result."""

    if isinstance(reply, str):
        return reply.strip()
    if isinstance(reply, dict):
        content = reply.get("content")
        if isinstance(content, str):
            return content.strip()
    return ""


@dataclass(slots=True)
class Ag2Oracle:
    """AG2 opponent using the documented `autogen` API.

    The session's instructions become the agent's system message and the
    session's recorded exchanges are replayed as conversation history, so the
    opponent keeps its memory across turns without a long-lived agent object.

    Environment variables supported:
    - OPENAI_MODEL
    - OPENAI_API_KEY (optional if OPENAI_BASE_URL is set)
    - OPENAI_BASE_URL (for OpenAI-compatible servers like Ollama, e.g. http://127.0.0.1:11434/v1)
    """

    name: str
    model: str

    async def send(self, *, session: OracleSession, message: str) -> OracleReply:
        llm_config = llm_config_from_env(default_model=self.model, model=session.model or None)

        agent = ConversableAgent(
            name=self.name,
            system_message=session.instructions,
            llm_config=llm_config,
            human_input_mode="NEVER",
        )

        messages = [m.as_message() for m in session.messages]
        messages.append({"role": "user", "content": message})

        reply = await agent.a_generate_reply(messages=messages)
        text = _extract_reply_text(reply)
        if not text:
            raise OracleError("Opponent returned an empty reply")

        return OracleReply(text=text, metadata={"model": session.model or self.model, "generation": session.generation})
