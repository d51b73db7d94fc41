"""
Scheduling Module

Provides the dialogue engine, appointment collection operations, reply
templates, draft completion and session threading.

Usage:
    from callflow.core.scheduling import SchedulingEngine
    from callflow.core.intelligence import ProcessContext

    engine = SchedulingEngine()
    outcome = engine.process(
        "Book a call with Jamie tomorrow at 9am",
        ProcessContext(appointments=[], pending=None),
    )
    print(outcome.reply)  # "All set. I've scheduled a call with Jamie for ..."
    # Feed outcome.appointments / outcome.pending into the next turn
"""

# Response Generator
from callflow.core.scheduling.response import (
    ResponseGenerator,
    DateFormatter,
    format_display_datetime,
    get_response_generator,
)

# Conversation Flow
from callflow.core.scheduling.flow import ConversationFlow

# Scheduling Engine (main orchestrator)
from callflow.core.scheduling.engine import (
    SchedulingEngine,
    get_scheduling_engine,
    process_message,
)

# Sessions (calling layer)
from callflow.core.scheduling.sessions import (
    SessionData,
    SessionManager,
    get_session_manager,
)

__all__ = [
    # Response Generator
    "ResponseGenerator",
    "DateFormatter",
    "format_display_datetime",
    "get_response_generator",
    # Conversation Flow
    "ConversationFlow",
    # Scheduling Engine
    "SchedulingEngine",
    "get_scheduling_engine",
    "process_message",
    # Sessions
    "SessionData",
    "SessionManager",
    "get_session_manager",
]
