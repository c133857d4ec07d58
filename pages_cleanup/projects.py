"""Pages project lookup shared by the deployment and Access flows."""

import logging

from .client import CloudflareClient, parse
from .models import PagesProject

logger = logging.getLogger(__name__)


def fetch_project(client: CloudflareClient) -> PagesProject:
    """
    GET the configured Pages project.

    Any failure here is fatal to the run: without the project there is no
    production id to protect and no subdomain to match Access apps against.
    """
    config = client.config
    data = client.call(
        config.project_path,
        context=f"fetch project {config.project_name}",
    )
    project = parse(PagesProject, data.get("result") or {}, f"fetch project {config.project_name}")
    logger.debug(f"[fetch] Project {config.project_name}: subdomain={project.subdomain} production={project.production_id}")
    return project
