import os
import logging
import logging.config
from contextlib import asynccontextmanager

import yaml
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from api.schemas import EntitySchema, IssueSchema, NamesRequest, NamesResponse
from namefinder.config import load_config
from namefinder.models import STATUS_LOAD_FAILURE, DecodeRequest
from namefinder.segment import segment
from namefinder.service import NameFinderService


def setup_logging():
    cfg_path = os.path.join("configs", "logging.yaml")
    if os.path.exists(cfg_path):
        try:
            with open(cfg_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
            os.makedirs("logs", exist_ok=True)
            logging.config.dictConfig(config)
        except (OSError, ValueError, yaml.YAMLError) as e:
            print(f"[logging] Failed to load logging.yaml: {e}")
            logging.basicConfig(level=logging.INFO)
    else:
        logging.basicConfig(level=logging.INFO)


def load_service() -> NameFinderService:
    cfg_path = os.environ.get(
        "NAMEFINDER_CONFIG", os.path.join("configs", "namefinder.yaml")
    )
    if os.path.exists(cfg_path):
        return NameFinderService(load_config(cfg_path))
    logger.warning("Config %s not found, using defaults", cfg_path)
    return NameFinderService()


setup_logging()
logger = logging.getLogger("api")
service = load_service()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    service.shutdown()


app = FastAPI(
    title="Name Finder",
    version="0.1.0",
    description="Proposes named entities around human-verified names.",
    lifespan=lifespan,
)

origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8501",  # streamlit
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.post("/names", response_model=NamesResponse)
def names(req: NamesRequest, response: Response) -> NamesResponse:
    logger.info("Received /names request (%d chars)", len(req.text))

    if req.sentences is None or req.tokens is None:
        sentences, tokens = segment(req.text)
    else:
        sentences = [(s.start, s.end) for s in req.sentences]
        tokens = [(t.start, t.end) for t in req.tokens]

    result = service.run(
        DecodeRequest(
            text=req.text,
            sentences=sentences,
            tokens=tokens,
            verified=[(v.start, v.end, v.label) for v in req.verified],
            model_path=req.model,
        )
    )
    if result.status == STATUS_LOAD_FAILURE:
        response.status_code = 503

    return NamesResponse(
        status=result.status,
        entities=[
            EntitySchema(
                start=e.start,
                end=e.end,
                text=e.text,
                label=e.label,
                probability=e.probability,
                verified=e.verified,
            )
            for e in result.entities
        ],
        issues=[
            IssueSchema(kind=i.kind, message=i.message, start=i.start, end=i.end)
            for i in result.issues
        ],
    )
