from typing import List

from fastapi import FastAPI, Form, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from .errors import AmbiguousFunctionError, FlowchartError, FunctionNotFoundError, SourceLoadError
from .pipeline import FlowReport, analyze_source
from .templates import render_template


class FlowRequest(BaseModel):
    code: str
    start: str = "main"
    filename: str = "<pasted>"


class Store:
    def __init__(self) -> None:
        self.items: List[FlowReport] = []
    def add(self, item: FlowReport) -> None:
        self.items.append(item)
    def all(self) -> List[FlowReport]:
        return list(self.items)
    def latest(self):
        return self.items[-1] if self.items else None

store = Store()


def _status_for(error: FlowchartError) -> int:
    if isinstance(error, FunctionNotFoundError):
        return 404
    if isinstance(error, AmbiguousFunctionError):
        return 409
    if isinstance(error, SourceLoadError):
        return 400
    return 500


def render(name: str, **ctx) -> HTMLResponse:
    return HTMLResponse(render_template(name, **ctx))


app = FastAPI(title="flowchart-ast", version="0.1")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


@app.get("/", response_class=HTMLResponse)
def index():
    report = store.latest()
    start = report.qualname if report else "main"
    return render("index.html", start=start, code="", report=report, error=None)


@app.post("/flow", response_model=FlowReport)
def flow_endpoint(req: FlowRequest):
    try:
        report = analyze_source(req.code, req.start, filename=req.filename)
    except FlowchartError as e:
        raise HTTPException(_status_for(e), str(e))
    store.add(report)
    return report


@app.post("/preview", response_class=HTMLResponse)
def preview_endpoint(code: str = Form(""), start: str = Form("main")):
    try:
        report = analyze_source(code, start, filename="<pasted>")
    except FlowchartError as e:
        return render("index.html", start=start, code=code, report=None, error=str(e))
    store.add(report)
    return render("index.html", start=start, code=code, report=report, error=None)


@app.get("/reports", response_model=List[FlowReport])
def reports():
    return store.all()
