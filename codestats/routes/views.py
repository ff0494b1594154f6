"""
View API routes (FastAPI)
Lists the live code stats view providers and renders them on demand
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from codestats.exceptions import (
    MalformedDefinition,
    RemoteQueryError,
    TransientFetchFailure,
    UnknownViewError,
)
from codestats.insights.models import RenderingContext
from codestats.services.code_stats_service import get_code_stats_extension
from codestats.services.view_host import VIEW_LOCATIONS

logger = logging.getLogger(__name__)

views_bp = APIRouter(prefix='/api/views', tags=['views'])


@views_bp.get('')
async def list_views(where: Optional[str] = Query(None, description="Rendering location: insightsPage or directory")):
    """List live view provider names, optionally for one rendering location."""
    if where is not None and where not in VIEW_LOCATIONS:
        return JSONResponse(
            {'success': False, 'error': f"Unknown view location '{where}'"},
            status_code=400
        )

    host = get_code_stats_extension().host
    views = host.list_views(where)
    logger.info(f"Listed {len(views)} view providers")
    return {'success': True, 'views': views}


@views_bp.get('/{name}')
async def render_view(
    name: str,
    uri: Optional[str] = Query(None, description="URI of the directory the view is shown next to")
):
    """
    Render one view.

    Parameters:
    - name: Registered view provider name, e.g. codeStatsInsight.codeStatsInsight.language.insightsPage
    - uri: Directory URI, e.g. git://github.com/sourcegraph/sourcegraph?main#cmd

    The chart is all-or-nothing: any failure returns an error instead of a partial view.
    """
    host = get_code_stats_extension().host
    context = RenderingContext(directory_uri=uri)

    try:
        view = await host.render(name, context)
    except UnknownViewError as e:
        return JSONResponse({'success': False, 'error': str(e)}, status_code=404)
    except MalformedDefinition as e:
        logger.error(f"Cannot render {name}: {e}")
        return JSONResponse({'success': False, 'error': str(e)}, status_code=422)
    except (RemoteQueryError, TransientFetchFailure) as e:
        logger.error(f"Search failed while rendering {name}: {e}")
        return JSONResponse({'success': False, 'error': str(e)}, status_code=502)
    except Exception as e:
        logger.error(f"Error rendering view {name}: {e}")
        return JSONResponse({'success': False, 'error': str(e)}, status_code=500)

    if view is None:
        return JSONResponse(
            {'success': False, 'error': f"View provider '{name}' was removed while rendering"},
            status_code=410
        )

    return {'success': True, 'view': view.to_dict()}
