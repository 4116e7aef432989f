from typing import Dict, Optional

from fastapi import FastAPI, HTTPException # type: ignore
from pydantic import BaseModel # type: ignore

from adapters.java_adapter import JavaAdapter
from implementor.encoding import escape_non_ascii
from implementor.errors import ImplerError, InvalidTargetError, RenderError, ResolutionError
from implementor.implementor import Implementor

app = FastAPI(title="Implementation Stub Generator (Java)", version="0.1.0")


class SourcesReq(BaseModel):
    # Either a single compilation unit OR a {filename: code} map
    code: Optional[str] = None
    filename: Optional[str] = None
    files: Optional[Dict[str, str]] = None


class ImplementReq(SourcesReq):
    type_name: str


class ImplementResp(BaseModel):
    type_name: str
    class_name: str
    package: Optional[str] = None
    file_name: str
    source: str


def _adapter_for(req: SourcesReq) -> JavaAdapter:
    adapter = JavaAdapter()
    units = dict(req.files or {})
    if req.code and req.code.strip():
        units[req.filename or "<code>"] = req.code
    if not units:
        raise HTTPException(status_code=400, detail="Provide either 'code' or 'files'.")

    for filename, code in units.items():
        try:
            adapter.add_source(code, filename=filename)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"{filename}: {e}")
    return adapter


def _status_for(e: ImplerError) -> int:
    if isinstance(e, InvalidTargetError):
        return 400
    if isinstance(e, ResolutionError):
        return 404
    if isinstance(e, RenderError):
        return 422
    return 500


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/implement", response_model=ImplementResp)
def implement(req: ImplementReq) -> ImplementResp:
    adapter = _adapter_for(req)
    try:
        unit = Implementor(adapter).generate(req.type_name)
    except ImplerError as e:
        raise HTTPException(status_code=_status_for(e), detail=str(e)) from e

    return ImplementResp(
        type_name=req.type_name,
        class_name=unit.class_name,
        package=unit.package,
        file_name=unit.file_name,
        source=escape_non_ascii(unit.text),
    )


@app.post("/hierarchy")
def hierarchy(req: SourcesReq):
    adapter = _adapter_for(req)
    return adapter.hierarchy().to_debug_json()
