import asyncio

import click
from flask import current_app

from sitebuilder.application.site import provision_sections
from sitebuilder.domain.sections import SECTION_NAMES
from sitebuilder.extensions import db
from sitebuilder.storage import SqlAlchemyRowStore


def register_commands(app):
    @app.cli.command("provision-sections")
    @click.argument("subdomain")
    @click.option(
        "--enable",
        "enabled",
        multiple=True,
        type=click.Choice(SECTION_NAMES),
        help="Enable only these sections (repeatable). Default: all but specialOffers.",
    )
    def provision_sections_command(subdomain, enabled):
        """Create missing section rows for a website."""
        rows = SqlAlchemyRowStore(db.engine, db.metadata)

        async def run():
            website = await rows.find_one("websites", subdomain=subdomain)
            if website is None:
                raise click.ClickException(f"No website with subdomain {subdomain!r}")
            return await provision_sections(
                rows,
                website_id=website["id"],
                enabled_sections=enabled or None,
            )

        inserted = asyncio.run(run())
        current_app.logger.info(f"provision-sections {subdomain}: {len(inserted)} created")
        click.echo(f"{len(inserted)} section(s) created for {subdomain}")
