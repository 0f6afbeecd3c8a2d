"""Screen state for the intake, review and edit flows."""

from fri.intake.notices import Notice
from fri.intake.session import EditSession, IntakeSession, ReviewSession

__all__ = ["Notice", "IntakeSession", "ReviewSession", "EditSession"]
