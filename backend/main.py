"""Main entry point for the EduAgent tutor API."""
import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings
from errors import AppError, InternalError, NotFoundError, ValidationError
from logger import setup_logging
from models.api import AgentResponse, ChatRequest, ChatResponse, CombinedChatResponse
from models.conversation import Conversation, Turn
from services.combined_tutor import CombinedTutor
from services.gemini_client import GeminiClient
from services.persona_orchestrator import PersonaOrchestrator
from services.response_parser import ResponseParser

# Initialize logging
logger = logging.getLogger(__name__)

# Settings are read once here; CORS middleware has to be configured before startup
settings: Settings = Settings.from_env()

# Initialize services (will be done on startup)
orchestrator: PersonaOrchestrator = None
combined_tutor: CombinedTutor = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize services on startup."""
    await startup_event()
    yield
    logger.info("EduAgent tutor API shutting down")


async def startup_event():
    global orchestrator, combined_tutor

    setup_logging(settings.log_level, json_format=settings.is_production)
    logger.info(
        f"Initializing EduAgent tutor services: environment={settings.environment}, "
        f"model={settings.gemini_model}"
    )

    try:
        settings.validate()

        gemini_client = GeminiClient.from_settings(settings)
        logger.info("Initialized GeminiClient")

        orchestrator = PersonaOrchestrator(gemini_client, settings.max_message_length)
        logger.info("Initialized PersonaOrchestrator")

        combined_tutor = CombinedTutor(gemini_client, ResponseParser(), settings.max_message_length)
        logger.info("Initialized CombinedTutor")

        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


# Initialize FastAPI app
app = FastAPI(
    title="EduAgent AI Tutor",
    description="Multi-persona tutoring backend powered by Google Gemini",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    log_fields = {
        "code": exc.code,
        "status_code": exc.status_code,
        "path": request.url.path,
        "method": request.method,
    }
    if exc.is_operational:
        logger.warning(f"Operational error: {exc.message}", extra=log_fields)
    else:
        logger.error(f"Non-operational error: {exc.message}", exc_info=exc, extra=log_fields)

    payload = exc.to_dict()
    if not exc.is_operational and settings.is_production:
        payload["message"] = "An internal server error occurred"
    return JSONResponse(status_code=exc.status_code, content=payload)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg', 'Invalid value')}")
    return await app_error_handler(request, ValidationError(", ".join(messages)))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        error = NotFoundError(f"Route {request.method} {request.url.path} not found")
    else:
        error = AppError(str(exc.detail))
        error.code = "HTTP_ERROR"
        error.status_code = exc.status_code
    return await app_error_handler(request, error)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unexpected error: {exc}",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method}
    )
    message = "An internal server error occurred" if settings.is_production else str(exc)
    return JSONResponse(status_code=500, content=InternalError(message).to_dict())


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "EduAgent AI Tutor API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "eduagent-tutor",
        "version": "1.0.0",
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@app.get("/api/chat/health")
async def chat_health():
    return {
        "status": "healthy",
        "service": "chat",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@app.post("/api/chat", response_model=ChatResponse)
async def chat_endpoint(request: ChatRequest) -> ChatResponse:
    """
    Answer a learner's message with the Explainer and Example Provider personas.

    Args:
        request: ChatRequest with message, optional history, subject and topic

    Returns:
        ChatResponse with one entry per persona that succeeded, explainer first

    Raises:
        ValidationError: Invalid message or history (400)
        RemoteApiError: Every persona failed (502)
    """
    logger.info(
        f"Chat request received: message_length={len(request.message)}, "
        f"history_turns={len(request.conversation_history)}, "
        f"subject={request.subject}, topic={request.topic}"
    )

    conversation = _build_conversation(request)
    responses = await asyncio.to_thread(orchestrator.execute, request.message, conversation)

    logger.info(f"Chat request processed successfully: response_count={len(responses)}")
    return ChatResponse(
        success=True,
        responses=[
            AgentResponse(
                message=response.text,
                agent_persona=response.persona,
                timestamp=response.produced_at
            )
            for response in responses
        ]
    )


@app.post("/api/chat/combined", response_model=CombinedChatResponse)
async def combined_chat_endpoint(request: ChatRequest) -> CombinedChatResponse:
    """Answer with one Gemini call split into explanation and example sections."""
    logger.info(f"Combined chat request received: message_length={len(request.message)}")

    conversation = _build_conversation(request)
    parsed = await asyncio.to_thread(combined_tutor.answer, request.message, conversation)

    return CombinedChatResponse(
        success=True,
        explanation=parsed.explanation,
        example=parsed.example,
        timestamp=datetime.now(timezone.utc)
    )


def _build_conversation(request: ChatRequest) -> Conversation:
    """
    Rebuild the client-supplied history as a Conversation.

    Raises:
        ValidationError: If a history entry is invalid or the history is too long
    """
    try:
        turns = [
            Turn.from_dict({
                "role": message.role,
                "content": message.content,
                "timestamp": message.timestamp,
                "persona": message.persona,
            })
            for message in request.conversation_history
        ]
        return Conversation(
            turns,
            subject=request.subject,
            topic=request.topic,
            max_turns=settings.max_conversation_history
        )
    except ValueError as e:
        raise ValidationError(f"Invalid conversation history: {e}")


if __name__ == "__main__":
    import uvicorn
    setup_logging(settings.log_level, json_format=settings.is_production)
    logger.info(f"Starting EduAgent AI Tutor API on port {settings.port}")
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
