# address_verification/cli.py
"""Operator commands for the address cache."""
import asyncio
import logging
from typing import Optional

import typer
from rich import print

from address_verification.configs import env
from address_verification.models.geo_node import GeoNodeType
from address_verification.services.address_resolver import AddressResolver
from address_verification.services.address_seed import (
    default_seed_file,
    seed_addresses,
    write_address_dump,
)
from address_verification.services.collation import turkish_equals
from address_verification.services.db import (
    close_database_client,
    get_database_client,
    init_database,
)
from address_verification.services.errors import NotFoundError
from address_verification.services.geo_node_service import GeoNodeService
from address_verification.services.geo_source import TurkiyeApiClient

logger = logging.getLogger(__name__)

app = typer.Typer(help="address-verification operator commands")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging.")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def _with_database(work):
    client = await get_database_client()
    await init_database(client[env.get("MONGO_DB")])
    try:
        return await work()
    finally:
        await close_database_client()


@app.command("fetch-dump")
def fetch_dump(
    output: Optional[str] = typer.Argument(
        None, help="Where to write the dump. Defaults to the configured seed file."
    ),
):
    """Fetches the whole hierarchy from the address API into a JSON dump."""
    output = output or default_seed_file()
    if not output:
        raise typer.BadParameter("No output path given and no seed file configured.")
    try:
        dump = write_address_dump(output, TurkiyeApiClient())
    except RuntimeError as e:
        print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)
    print(f"[green]Wrote {len(dump['provinces'])} provinces to {output}[/green]")


@app.command("seed")
def seed(
    file: Optional[str] = typer.Option(None, "--file", "-f", help="Dump to load."),
):
    """Loads a hierarchy dump into the cache unless it is already populated."""
    written = asyncio.run(_with_database(lambda: seed_addresses(file)))
    print(f"[green]{written} nodes upserted[/green]")


async def _add_neighborhood(province: str, district: str, neighborhood: str) -> Optional[str]:
    store = GeoNodeService()
    resolver = AddressResolver(store=store)
    province_node = await store.find_by_type_and_name(GeoNodeType.PROVINCE, province)
    if province_node is not None:
        district_node = await store.find_by_type_and_name(
            GeoNodeType.DISTRICT, district, parent_id=province_node.id
        )
        if district_node is not None:
            existing = await store.find_by_type_and_name(
                GeoNodeType.NEIGHBORHOOD, neighborhood, parent_id=district_node.id
            )
            if existing is not None:
                return None
    node = await resolver.add_manual_neighborhood(province, district, neighborhood)
    return node.id


@app.command("add-neighborhood")
def add_neighborhood(
    province: str = typer.Argument(..., help="Province name, e.g. Antalya."),
    district: str = typer.Argument(..., help="District name within the province."),
    neighborhood: str = typer.Argument(..., help="Neighborhood name to add."),
):
    """Adds a manually entered neighborhood under an existing district."""
    try:
        place_id = asyncio.run(
            _with_database(lambda: _add_neighborhood(province, district, neighborhood))
        )
    except NotFoundError as e:
        print(f"[red]{e.detail}[/red]")
        raise typer.Exit(code=1)
    if place_id is None:
        print(f"[yellow]'{neighborhood}' already exists under {district}.[/yellow]")
        return
    print(f"[green]Added '{neighborhood}' as {place_id}[/green]")


async def _district_neighborhoods(province: str, district: str):
    store = GeoNodeService()
    province_node = await store.find_by_type_and_name(GeoNodeType.PROVINCE, province)
    if province_node is None:
        raise NotFoundError(f"İl bulunamadı: {province}")
    district_node = await store.find_by_type_and_name(
        GeoNodeType.DISTRICT, district, parent_id=province_node.id
    )
    if district_node is None:
        raise NotFoundError(f"İlçe bulunamadı: {district} ({province_node.name})")
    return await store.find_by_type_and_parent(GeoNodeType.NEIGHBORHOOD, district_node.id)


@app.command("check-neighborhood")
def check_neighborhood(
    province: str = typer.Argument(...),
    district: str = typer.Argument(...),
    name: Optional[str] = typer.Argument(None, help="Neighborhood to look for."),
):
    """Lists the cached neighborhoods of a district."""
    try:
        nodes = asyncio.run(_with_database(lambda: _district_neighborhoods(province, district)))
    except NotFoundError as e:
        print(f"[red]{e.detail}[/red]")
        raise typer.Exit(code=1)

    print(f"{len(nodes)} neighborhoods cached for {district}.")
    if name is None:
        for node in nodes:
            print(f"  {node.id}  {node.name}")
        return
    match = next((node for node in nodes if turkish_equals(node.name, name)), None)
    if match is None:
        print(f"[red]'{name}' not found.[/red]")
        raise typer.Exit(code=1)
    print(f"[green]'{name}' found as {match.id}[/green]")


if __name__ == "__main__":
    app()
