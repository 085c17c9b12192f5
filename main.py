# main.py
from flask import Flask, request, jsonify
from pydantic import ValidationError
import logging
from typing import Optional

# Loads .env on import
import config

from services.bot_logic import ChatOrchestrator, now_iso
from services.booking_api import BookingAPI
from services.llm import LLM
from services.router import build_router
from services.schemas import ChatRequest

# -------------------- Basic setup --------------------

# Logs go to stdout
logging.basicConfig(level=config.LOG_LEVEL)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
}


def build_orchestrator() -> ChatOrchestrator:
    # registry and permission table are built once and only read afterwards
    return ChatOrchestrator(router=build_router(BookingAPI()), llm=LLM())


def create_app(orchestrator: Optional[ChatOrchestrator] = None) -> Flask:
    app = Flask(__name__)
    log = app.logger
    bot = orchestrator or build_orchestrator()

    @app.after_request
    def add_security_headers(response):
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    # -------------------- Routes --------------------

    @app.route("/", methods=["GET"])
    def index():
        return "Agent service is running!"

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok", "timestamp": now_iso()}), 200

    @app.post("/api/chat")
    async def chat():
        """Body JSON: {"message": "...", "userId": "...", "sessionId": "...", "context": {"role": "staff"}}"""
        try:
            data = request.get_json(force=True, silent=True)
            try:
                req = ChatRequest.model_validate(data if data is not None else {})
            except ValidationError as e:
                details = e.errors(include_url=False, include_input=False, include_context=False)
                return jsonify({"error": "Invalid request format", "details": details}), 400

            resp = await bot.process_message(
                req.message,
                user_id=req.user_id,
                session_id=req.session_id,
                context=req.context,
            )
            return jsonify(resp.to_dict())
        except Exception:
            log.exception("Chat request failed")
            return jsonify({"error": "Internal server error", "message": "Failed to process chat request"}), 500

    return app


app = create_app()

# -------------------- Local run --------------------

if __name__ == "__main__":
    # python main.py
    app.run(host=config.HOST, port=config.PORT)
