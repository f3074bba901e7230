import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Routers
from hcw_assistant.routers.health import router as health_router
from hcw_assistant.routers.assistant import router as assistant_router, error_payload

from hcw_assistant.core.config import settings
from hcw_assistant.core.logging import setup_logging
from hcw_assistant.core.middleware import RequestLoggingMiddleware

# Policy bootstrap
from hcw_assistant.services.policy.loader import load_policy_from_file
from hcw_assistant.services.policy.registry import PolicyRegistry

# Supabase (singleton) + generative client
from hcw_assistant.infra.supabase_client import get_supabase
from hcw_assistant.infra.llm_client import build_llm_client

from hcw_assistant.repositories.business_repo import SupabaseBusinessRepository
from hcw_assistant.repositories.session_repo import StaffChatSessionRepository
from hcw_assistant.services.assistant.assistant_service import StaffAssistantService
from hcw_assistant.services.assistant.conversation_store import ConversationStore
from hcw_assistant.services.assistant.response_contract import ResponseContractEnforcer
from hcw_assistant.services.context.context_builder import ContextAssembler

logger = logging.getLogger("hcw.boot")


def build_assistant_service(*, business_store, session_store, llm, policy, tz_name: str) -> StaffAssistantService:
    return StaffAssistantService(
        assembler=ContextAssembler(business_store, policy=policy, tz_name=tz_name),
        enforcer=ResponseContractEnforcer(llm, prompt_spec=policy.prompt),
        conversations=ConversationStore(session_store),
    )


def create_app() -> FastAPI:
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(title="HealthCareWorld Staff Assistant")

    # -------------------------------------------------
    # CORS + request logging
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type", "x-request-id"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    @app.middleware("http")
    async def inject_request_context(request: Request, call_next):
        if not hasattr(request.app.state, "assistant"):
            raise RuntimeError("Assistant service (app.state.assistant) is not initialized")
        request.state.assistant = request.app.state.assistant
        return await call_next(request)

    # -------------------------------------------------
    # Errors: a body we cannot read still gets an envelope
    # -------------------------------------------------
    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        logger.warning("invalid request path=%s errors=%s", request.url.path, exc.errors()[:3])
        return JSONResponse(status_code=400, content=error_payload())

    # -------------------------------------------------
    # Startup
    # -------------------------------------------------
    @app.on_event("startup")
    def startup():
        # 1) Load policy
        policy = load_policy_from_file(settings.ASSISTANT_POLICY_PATH)
        PolicyRegistry.load(policy)
        logger.info("[BOOT] Policy loaded: %s (%s)", policy.meta.policy_id, policy.meta.version)

        # 2) Wire Supabase + generative client (fail fast); tests pre-install their own service
        if not hasattr(app.state, "assistant"):
            sb = get_supabase()
            app.state.assistant = build_assistant_service(
                business_store=SupabaseBusinessRepository(sb),
                session_store=StaffChatSessionRepository(sb),
                llm=build_llm_client(settings),
                policy=PolicyRegistry.get(),
                tz_name=settings.ASSISTANT_TIMEZONE,
            )
            logger.info("[BOOT] Assistant ready provider=%s tz=%s", settings.LLM_PROVIDER, settings.ASSISTANT_TIMEZONE)

    # -------------------------------------------------
    # Routers
    # -------------------------------------------------
    app.include_router(health_router, prefix="/api/v1/health", tags=["health"])
    app.include_router(assistant_router, prefix="/api/v1/staff-assistant", tags=["staff-assistant"])

    return app


app = create_app()
