from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile

from .models import (
    HealthResponse,
    LineBreakPolicy,
    ParsedTable,
    ParseOptions,
    ParseResponse,
    ParseTextRequest,
    ReportSummary,
    SpaceAroundQuotesPolicy,
    StringifyRequest,
    StringifyResponse,
    TrailingLineFeedPolicy,
)
from .normalize import decode_text, describe_line_breaks
from .parser import parse
from .rules import DEFAULT_QUOTE, DEFAULT_SEPARATOR, SUPPORTED_SUFFIXES
from .stringify import InvalidTableError, stringify

app = FastAPI(
    title="lenient-csv",
    description="Permissive CSV parsing and stringifying for real-world dialects",
    version="0.1.0",
)


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/parse", response_model=ParseResponse)
async def parse_upload(
    file: UploadFile = File(...),
    quote: Optional[str] = Form(default=DEFAULT_QUOTE),
    separators: str = Form(default=DEFAULT_SEPARATOR),
    line_break_policy: LineBreakPolicy = Form(default=LineBreakPolicy.strict),
    trailing_line_feed_policy: TrailingLineFeedPolicy = Form(default=TrailingLineFeedPolicy.ignore),
    space_around_quotes_policy: SpaceAroundQuotesPolicy = Form(default=SpaceAroundQuotesPolicy.ignore),
    taint_emulation: bool = Form(default=False),
):
    if not file.filename or not file.filename.lower().endswith(SUPPORTED_SUFFIXES):
        raise HTTPException(
            status_code=422,
            detail=f"Only {', '.join(SUPPORTED_SUFFIXES)} files are supported",
        )

    raw = await file.read()
    text, encoding = decode_text(raw)

    options = ParseOptions(
        quote=quote,
        separators=separators,
        line_break_policy=line_break_policy,
        trailing_line_feed_policy=trailing_line_feed_policy,
        space_around_quotes_policy=space_around_quotes_policy,
        taint_emulation=taint_emulation,
    )
    table = parse(text, options)

    return ParseResponse(
        table=table,
        report=ReportSummary(
            rows=len(table.rows),
            columns=len(table.header),
            encoding=encoding,
            newlines=describe_line_breaks(text),
        ),
    )


@app.post("/parse/text", response_model=ParsedTable)
def parse_text(request: ParseTextRequest):
    return parse(request.text, request.options)


@app.post("/stringify", response_model=StringifyResponse)
def stringify_table(request: StringifyRequest):
    try:
        text = stringify(request.table, request.options)
    except InvalidTableError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"text": text}
