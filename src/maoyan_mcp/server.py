"""
MCP server exposing Maoyan showtime queries as tools.

Tools exposed:
  • get_current_time        — current local time
  • get_cinema_list         — nearby cinemas for a latitude/longitude
  • get_cinema_information  — cinema detail (WGS-84 location) and showtimes
  • get_movie_detail_info   — movie detail by id
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from mcp.types import TextContent

from maoyan_mcp.config import settings
from maoyan_mcp.exceptions import FetchFailed, RequestFailed
from maoyan_mcp.schemas import CinemaId, CityName, Latitude, Longitude, MovieId
from maoyan_mcp.services.city_index import CityIndex
from maoyan_mcp.services.fetcher import RemoteFetcher
from maoyan_mcp.services.showtimes import ShowtimeService

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Look up movie showtimes from Maoyan. Use get_cinema_list with the user's "
    "latitude and longitude to find nearby cinemas, then get_cinema_information "
    "with the city name and a cinema ID for its location and schedule, and "
    "get_movie_detail_info for details of a movie from that schedule."
)


class MovieTools:
    """Tool handlers bound to a ``ShowtimeService``."""

    def __init__(self, service: ShowtimeService) -> None:
        self.service = service

    async def get_current_time(self) -> str:
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    async def get_cinema_list(self, latitude: Latitude, longitude: Longitude) -> str:
        try:
            return await self.service.list_nearby_cinemas(latitude, longitude)
        except RequestFailed as e:
            raise ToolError(e.stage) from e

    async def get_cinema_information(
        self, cityname: CityName, cinema_id: CinemaId
    ) -> list[TextContent]:
        try:
            info = await self.service.get_cinema_detail(cityname, cinema_id)
        except RequestFailed as e:
            raise ToolError(e.stage) from e

        return [
            TextContent(type="text", text=info.cinema),
            TextContent(type="text", text=info.showtimes),
        ]

    async def get_movie_detail_info(self, movie_id: MovieId) -> str:
        try:
            return await self.service.get_movie_detail(movie_id)
        except RequestFailed as e:
            raise ToolError(e.stage) from e


def register_tools(mcp: FastMCP, tools: MovieTools) -> None:
    """Register every ``MovieTools`` handler on an MCP server."""
    mcp.tool(
        name="get_current_time",
        description="Gets the current system time",
    )(tools.get_current_time)
    mcp.tool(
        name="get_cinema_list",
        description=(
            "Get a list of nearby movie theaters based on the latitude and longitude "
            "of the user's current location. It is not possible to obtain information "
            "on the latitude and longitude of the cinema here"
        ),
    )(tools.get_cinema_list)
    mcp.tool(
        name="get_cinema_information",
        description=(
            "Get detailed information about the cinema and its movie schedule based on "
            "the cinema ID and city name, including the latitude and longitude of the "
            "cinema, the schedule of the cinema, and more"
        ),
    )(tools.get_cinema_information)
    mcp.tool(
        name="get_movie_detail_info",
        description="Get movie details based on the movie ID",
    )(tools.get_movie_detail_info)


async def populate_city_index(city_index: CityIndex) -> bool:
    """
    Populate the city index at session start.

    A failure is logged and swallowed so the session still starts; city
    lookups keep failing until a later populate succeeds.

    Returns:
        True if the index was populated
    """
    try:
        await city_index.populate()
    except FetchFailed as e:
        logger.error(f"City index unavailable, city lookups will fail: {e}")
        return False
    return True


def create_server(
    fetcher: RemoteFetcher | None = None,
    city_index: CityIndex | None = None,
    service: ShowtimeService | None = None,
) -> FastMCP:
    """
    Build the MCP server and wire its components together.

    Args:
        fetcher: Shared fetcher (a default one is created if not provided)
        city_index: City index to populate on session start
        service: Query orchestrator (built from fetcher and city_index if not provided)

    Returns:
        Configured FastMCP server
    """
    fetcher = fetcher or RemoteFetcher()
    city_index = city_index or CityIndex(fetcher)
    service = service or ShowtimeService(fetcher, city_index)

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[None]:
        await populate_city_index(city_index)
        yield

    mcp = FastMCP(name=settings.server_name, instructions=INSTRUCTIONS, lifespan=lifespan)
    register_tools(mcp, MovieTools(service))
    return mcp


def run(
    transport: str | None = None,
    host: str | None = None,
    port: int | None = None,
) -> None:
    """Start the MCP server."""
    transport = transport or settings.transport
    mcp = create_server()

    if transport == "stdio":
        logger.info(f"Starting {settings.server_name} over stdio")
        mcp.run(transport="stdio")
        return

    host = host or settings.host
    port = port or settings.port
    logger.info(f"Starting {settings.server_name} over {transport} on http://{host}:{port}")
    mcp.run(transport=transport, host=host, port=port)
