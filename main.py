import logging
from typing import Optional

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response

from file_icons import (
    MAX_FONT_SIZE,
    MIN_FONT_SIZE,
    PALETTE,
    FileIconError,
    FileIconRenderer,
    FileIconTemplate,
    InternalRenderFailure,
    TemplateError,
    validate_icon_request,
)
from settings import Settings, get_settings

__version__ = "1.0.0"

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("icon-forge")

router = APIRouter()


# ---- Icon Helpers ----

def build_renderer(settings: Settings) -> FileIconRenderer:
    """Load the SVG template once and bind it to the fixed palette."""
    template = FileIconTemplate.load(settings.template_path)
    source = settings.template_path or "embedded template"
    logger.info(f"Loaded file icon template from {source}")
    return FileIconRenderer(template, PALETTE)


def get_renderer(request: Request) -> FileIconRenderer:
    renderer = request.app.state.renderer
    if renderer is None:
        raise InternalRenderFailure(request.app.state.template_error or "Template not loaded")
    return renderer


def render_icon_response(
    request: Request,
    ext: Optional[str],
    extension: Optional[str],
    text_color: Optional[str],
    font_size: Optional[str],
    bg_color: Optional[str],
) -> Response:
    """Validate query values, render the SVG and wrap it with caching headers."""
    try:
        icon_request = validate_icon_request(
            ext=ext,
            extension=extension,
            text_color=text_color,
            font_size=font_size,
            bg_color=bg_color,
        )
        svg_content = get_renderer(request).render(icon_request)
    except FileIconError:
        raise
    except Exception as e:
        raise InternalRenderFailure(str(e)) from e

    max_age = request.app.state.settings.cache_max_age
    return Response(
        content=svg_content,
        media_type="image/svg+xml",
        headers={
            "Cache-Control": f"public, max-age={max_age}",
            "Content-Disposition": f'inline; filename="{icon_request.extension}.svg"',
        },
    )


# ---- FastAPI Routes ----

@router.get("/file-icon")
async def file_icon(
    request: Request,
    ext: Optional[str] = None,
    extension: Optional[str] = None,
    text_color: Optional[str] = Query(None, alias="textColor"),
    font_size: Optional[str] = Query(None, alias="fontSize"),
    bg_color: Optional[str] = Query(None, alias="bgColor"),
):
    """
    Generate a file icon SVG for an extension.

    Query parameters:
        ext / extension: file extension, alphanumeric, max 10 chars (required)
        textColor: text color as 6 hex digits without '#' (default FFFFFF)
        fontSize: font size between 10 and 40 (default 26, or 20 for 5+ chars)
        bgColor: background color as 6 hex digits without '#' (default picked from the extension)

    Returns: SVG markup with image/svg+xml content type
    """
    return render_icon_response(request, ext, extension, text_color, font_size, bg_color)


@router.get("/file-icon/{extension}")
async def file_icon_for_extension(
    request: Request,
    extension: str,
    text_color: Optional[str] = Query(None, alias="textColor"),
    font_size: Optional[str] = Query(None, alias="fontSize"),
    bg_color: Optional[str] = Query(None, alias="bgColor"),
):
    """Path form of /file-icon: /file-icon/js?textColor=0078d4"""
    return render_icon_response(request, extension, None, text_color, font_size, bg_color)


@router.get("/health")
async def health():
    """Health check endpoint for monitoring."""
    return {
        "status": "OK",
        "message": "File Icon Generation server is running",
        "endpoints": ["/file-icon", "/file-icon/{extension}", "/health", "/api/docs"],
        "version": __version__,
    }


@router.get("/api/docs")
async def api_docs():
    """Machine readable description of the icon API."""
    return {
        "title": "File Icon Generation API",
        "description": "Generate dynamic SVG file icons with custom extensions and styling options",
        "version": __version__,
        "endpoints": {
            "GET /file-icon": {
                "description": "Generate a file icon SVG with optional styling parameters",
                "parameters": {
                    "ext": "File extension (e.g., png) - required",
                    "extension": "File extension (e.g., jpg) - alias for ext",
                    "textColor": "Text color in hex format without '#' (e.g., 0078d4) - optional",
                    "fontSize": f"Font size in pixels ({MIN_FONT_SIZE}-{MAX_FONT_SIZE}) - optional",
                    "bgColor": "Background color in hex format without '#' (e.g., f44336) - optional",
                },
                "example": "/file-icon?ext=png&textColor=0078d4&fontSize=28&bgColor=f44336",
            },
            "GET /file-icon/{extension}": {
                "description": "Same as /file-icon with the extension in the path",
                "parameters": {
                    "textColor": "Optional, as above",
                    "fontSize": "Optional, as above",
                    "bgColor": "Optional, as above",
                },
                "example": "/file-icon/js",
            },
            "GET /health": {
                "description": "Health check endpoint",
                "parameters": {},
                "example": "/health",
            },
        },
        "examples": [
            "GET /file-icon?ext=png",
            "GET /file-icon?ext=js&textColor=f39c12",
            "GET /file-icon?ext=pdf&fontSize=36&bgColor=e74c3c",
            "GET /file-icon?ext=docx&textColor=0078d4&fontSize=28&bgColor=3498db",
            "GET /file-icon?ext=json&textColor=ff6b35&fontSize=24&bgColor=2ecc71",
        ],
        "validation": {
            "ext": "Required. Alphanumeric characters only, max 10 characters",
            "textColor": "Optional. Six hex digits without '#' (000000 to FFFFFF)",
            "fontSize": f"Optional. Number between {MIN_FONT_SIZE} and {MAX_FONT_SIZE}",
            "bgColor": "Optional. Six hex digits without '#' (000000 to FFFFFF)",
        },
        "notes": [
            "Icon endpoints return SVG content with appropriate headers",
            "File extensions are converted to uppercase in the generated icon",
            "Default text color is white (#FFFFFF)",
            "Default font size is 26px (or 20px for extensions 5+ characters)",
            "Default font family is Fredoka",
            "Default font weight is 500",
            "SVG responses are cacheable for one day",
            "Background colors are automatically selected based on extension if not specified",
        ],
    }


@router.get("/", response_class=HTMLResponse)
async def root():
    """Serve the landing page."""
    return LANDING_PAGE


LANDING_PAGE = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Icon Forge</title>
    <style>
        * {
            margin: 0;
            padding: 0;
            box-sizing: border-box;
        }

        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Oxygen, Ubuntu, Cantarell, sans-serif;
            background: #1e1e2e;
            color: #333;
            min-height: 100vh;
            display: flex;
            justify-content: center;
            padding: 40px 20px;
        }

        .container {
            background: white;
            border-radius: 16px;
            box-shadow: 0 20px 60px rgba(0, 0, 0, 0.3);
            padding: 40px;
            max-width: 760px;
            width: 100%;
        }

        h1 {
            margin-bottom: 20px;
            font-size: 1.8rem;
        }

        h2 {
            margin-bottom: 10px;
            font-size: 1.2rem;
            color: #F44336;
        }

        .section {
            margin-bottom: 28px;
        }

        table {
            width: 100%;
            border-collapse: collapse;
        }

        th, td {
            text-align: left;
            padding: 8px;
            border-bottom: 1px solid #e0e0e0;
        }

        code {
            background: #2d2d3f;
            color: #fff;
            padding: 2px 6px;
            border-radius: 4px;
            font-size: 0.9rem;
        }

        .examples {
            display: flex;
            flex-wrap: wrap;
            gap: 16px;
        }

        .example {
            text-align: center;
            font-size: 0.8rem;
        }

        .example img {
            width: 60px;
            height: 72px;
            display: block;
            margin: 0 auto 6px;
        }

        .footer {
            border-top: 1px solid #e0e0e0;
            padding-top: 20px;
            font-size: 0.85rem;
            color: #666;
        }

        .footer a {
            color: #2196F3;
        }
    </style>
</head>
<body>
    <div class="container">
        <h1>Icon Forge - Dynamic File Icon Generator API</h1>

        <div class="section">
            <h2>Overview</h2>
            <p>Icon Forge generates SVG file icons for any file extension, with optional styling.</p>
        </div>

        <div class="section">
            <h2>Endpoints</h2>
            <table>
                <thead>
                    <tr><th>Method</th><th>Endpoint</th><th>Description</th></tr>
                </thead>
                <tbody>
                    <tr><td>GET</td><td>/file-icon?ext=EXT</td><td>Generate icon for extension (e.g. <code>ext=js</code>)</td></tr>
                    <tr><td>GET</td><td>/file-icon/EXT</td><td>Same, with the extension in the path</td></tr>
                    <tr><td>GET</td><td>/health</td><td>Health check</td></tr>
                    <tr><td>GET</td><td>/api/docs</td><td>API description as JSON</td></tr>
                </tbody>
            </table>
        </div>

        <div class="section">
            <h2>Parameters</h2>
            <ul>
                <li><b>ext</b> or <b>extension</b>: File extension (alphanumeric, max 10 chars)</li>
                <li><b>fontSize</b>: Font size in px (10-40)</li>
                <li><b>textColor</b>: Text color (hex, e.g. <code>0078d4</code>)</li>
                <li><b>bgColor</b>: Background color (hex, e.g. <code>3498db</code>)</li>
            </ul>
        </div>

        <div class="section">
            <h2>Examples</h2>
            <div class="examples">
                <div class="example"><img src="/file-icon?ext=js" alt="js icon"><code>ext=js</code></div>
                <div class="example"><img src="/file-icon?ext=pdf" alt="pdf icon"><code>ext=pdf</code></div>
                <div class="example"><img src="/file-icon?ext=docx&textColor=0078d4&fontSize=25&bgColor=3498db" alt="docx icon"><code>ext=docx&amp;textColor=0078d4&amp;fontSize=25&amp;bgColor=3498db</code></div>
                <div class="example"><img src="/file-icon?ext=json&textColor=ff6b35&fontSize=25&bgColor=2ecc71" alt="json icon"><code>ext=json&amp;textColor=ff6b35&amp;fontSize=25&amp;bgColor=2ecc71</code></div>
            </div>
        </div>

        <div class="section footer">
            <p>Icon Forge | <a href="/api/docs">API JSON</a> | <a href="/health">Health</a></p>
        </div>
    </div>
</body>
</html>
"""


async def file_icon_exception_handler(request: Request, exc: FileIconError):
    """Custom exception handler to return JSON errors."""
    if isinstance(exc, InternalRenderFailure):
        logger.error(f"SVG generation error: {exc.details}", exc_info=exc)
        content = {"error": exc.message, "details": exc.details}
    else:
        content = {"error": exc.message, "field": exc.field}
    return JSONResponse(
        status_code=exc.status_code,
        content=content
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with its template and palette loaded up front."""
    settings = settings or get_settings()

    app = FastAPI(title="Icon Forge", version=__version__)
    app.state.settings = settings
    app.state.renderer = None
    app.state.template_error = None

    try:
        app.state.renderer = build_renderer(settings)
    except TemplateError as e:
        # Served as 500 on the icon routes; /health stays up
        logger.error(f"Failed to load file icon template: {e.details}")
        app.state.template_error = e.details

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_exception_handler(FileIconError, file_icon_exception_handler)
    app.include_router(router)
    return app


app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
