# src/nlp/conversation.py
"""Append-only chat log with deferred, cancellable replies.

Every accepted ``send`` appends the user message immediately and schedules
its own reply task. Replies from different sends may land in any order, but a
reply is only ever appended after the message that triggered it. ``close``
cancels everything still pending, so nothing is appended afterwards.
"""
import asyncio
import enum
import inspect
import itertools
import logging
from typing import Any, List, Optional, Tuple

from config import config
from nlp.messages import Attachment, AttachmentKind, Message, Reply, Role
from nlp.responders import QUICK_PROMPTS, Responder
from nlp.scheduling import AsyncioScheduler, CancellationToken, Scheduler

logger = logging.getLogger(__name__)

DEFAULT_RESPONSE_DELAY_MS = 1000


class SessionState(enum.Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"


def coerce_reply(result: Any) -> Reply:
    """Accept a Reply or a ``{content, attachments}`` mapping from a responder"""
    if isinstance(result, Reply):
        return result
    if isinstance(result, dict) and 'content' in result:
        attachments = tuple(
            a if isinstance(a, Attachment)
            else Attachment(AttachmentKind(a['kind']), a['title'], a['description'])
            for a in result.get('attachments') or ()
        )
        return Reply(str(result['content']), attachments)
    raise TypeError(f"Responder returned unsupported reply type: {type(result).__name__}")


class ConversationSession:
    def __init__(self, responder: Responder, scheduler: Optional[Scheduler] = None,
                 response_delay_ms: Optional[float] = None, greeting: Optional[str] = None):
        self.responder = responder
        self.scheduler = scheduler or AsyncioScheduler()
        if response_delay_ms is None:
            response_delay_ms = config.get('chat.response_delay_ms', DEFAULT_RESPONSE_DELAY_MS)
        self.response_delay_ms = float(response_delay_ms)

        self._messages: List[Message] = []
        self._pending = set()
        self._ids = itertools.count(1)
        self._closed = False

        if greeting:
            self._append(Role.SYSTEM, greeting)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def pending_responses(self) -> frozenset:
        return frozenset(self._pending)

    @property
    def state(self) -> SessionState:
        return SessionState.AWAITING_RESPONSE if self._pending else SessionState.IDLE

    @property
    def closed(self) -> bool:
        return self._closed

    @staticmethod
    def quick_prompts() -> Tuple[str, ...]:
        return QUICK_PROMPTS

    def send(self, text: str) -> Optional[Message]:
        """Append a user message and schedule its reply; blank input is ignored"""
        if self._closed:
            logger.warning("Ignoring message sent to a closed conversation session")
            return None
        if not text or not text.strip():
            return None

        message = self._new_message(Role.USER, text)

        def fire():
            self._respond(message, token)

        try:
            token = self.scheduler.schedule(self.response_delay_ms, fire, label=f"reply-to-{message.id}")
        except RuntimeError as e:
            # The message only enters the log once its reply is scheduled
            logger.error(f"Cannot schedule a reply, message not sent: {e}")
            return None

        self._messages.append(message)
        self._pending.add(token)
        return message

    def close(self):
        """Cancel every pending reply; the log is frozen from here on"""
        if self._closed:
            return
        self._closed = True
        cancelled = 0
        for token in list(self._pending):
            if token.cancel():
                cancelled += 1
        self._pending.clear()
        logger.info(f"Conversation session closed, {cancelled} pending response(s) cancelled")

    async def wait_until_idle(self, poll_interval: float = 0.05, timeout: Optional[float] = None):
        """Sleep on the running loop until no replies are pending"""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout if timeout is not None else None
        while self._pending:
            if deadline is not None and loop.time() >= deadline:
                raise asyncio.TimeoutError("Conversation still awaiting responses")
            await asyncio.sleep(poll_interval)

    def _new_message(self, role: Role, content: str, attachments: Tuple[Attachment, ...] = (),
                     reply_to: Optional[str] = None) -> Message:
        return Message(
            id=str(next(self._ids)),
            role=role,
            content=content,
            timestamp=self.scheduler.now(),
            attachments=tuple(attachments),
            reply_to=reply_to,
        )

    def _append(self, role: Role, content: str, attachments: Tuple[Attachment, ...] = (),
                reply_to: Optional[str] = None) -> Message:
        message = self._new_message(role, content, attachments, reply_to)
        self._messages.append(message)
        return message

    def _history_through(self, trigger: Message) -> Tuple[Message, ...]:
        index = self._messages.index(trigger)
        return tuple(self._messages[:index + 1])

    def _respond(self, trigger: Message, token: CancellationToken):
        self._pending.discard(token)
        if self._closed:
            return

        try:
            result = self.responder.respond(self._history_through(trigger))
        except Exception as e:
            logger.error(f"Responder failed for message {trigger.id}: {e}")
            return

        if inspect.isawaitable(result):
            self._await_reply(trigger, result)
            return

        self._append_reply(trigger, result)

    def _await_reply(self, trigger: Message, awaitable):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error(f"Asynchronous responder needs a running event loop; no reply to message {trigger.id}")
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return

        task = asyncio.ensure_future(awaitable, loop=loop)
        token = CancellationToken(label=f"await-reply-to-{trigger.id}")
        token.add_cancel_callback(task.cancel)
        self._pending.add(token)

        def finished(done: asyncio.Future):
            self._pending.discard(token)
            if self._closed or token.cancelled or done.cancelled():
                return
            token.mark_done()
            error = done.exception()
            if error is not None:
                logger.error(f"Responder failed for message {trigger.id}: {error}")
                return
            self._append_reply(trigger, done.result())

        task.add_done_callback(finished)

    def _append_reply(self, trigger: Message, result: Any):
        try:
            reply = coerce_reply(result)
        except (TypeError, KeyError, ValueError) as e:
            logger.error(f"Discarding malformed reply to message {trigger.id}: {e}")
            return
        self._append(Role.SYSTEM, reply.content, reply.attachments, reply_to=trigger.id)
