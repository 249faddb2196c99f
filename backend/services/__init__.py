"""Services for the EduAgent tutor backend."""
from .gemini_client import GeminiClient
from .response_parser import ResponseParser
from .persona_orchestrator import PersonaOrchestrator, validate_query
from .combined_tutor import CombinedTutor

__all__ = ['GeminiClient', 'ResponseParser', 'PersonaOrchestrator', 'validate_query', 'CombinedTutor']
