"""
This module purpose is to handle command line interface
"""

import argparse
import logging
import sys

from .app_config import PodlabAppConfig
from .config import ClusterConfig, DEFAULT_CLUSTER_NAME
from .errors import PodlabError, UnknownRole, InvalidMountPath
from .provider import Provider
from .utils import ensure_kubectl_available, info, success, error, warning, heading

def main(argv=None):
    """
    main: main loop for the program
    """
    parser = argparse.ArgumentParser(description="podlab - pod-backed cluster provisioner")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # podlab create cluster
    prepare_cmd_create(subparsers)

    # podlab delete cluster
    prepare_cmd_delete(subparsers)

    # podlab get clusters|nodes|endpoint
    prepare_cmd_get(subparsers)

    args = parser.parse_args(argv)

    try:
        app_config = PodlabAppConfig().load(_overrides(args))
        settings = app_config.settings()
    except PodlabError as e:
        error(f"Invalid configuration: {e}")
        return 1

    setup_logging(settings.log_level, args.verbose)
    if not getattr(args, "dry_run", False):
        ensure_kubectl_available(settings.kubectl)
    provider = Provider.from_settings(settings)

    if args.command == "create":
        return cmd_create(args, provider, settings)
    elif args.command in ["delete", "rm"]:
        return cmd_delete(args, provider)
    elif args.command == "get":
        return cmd_get(args, provider)
    return 1

def _overrides(args):
    """
    _overrides: command line values that take part in config layering
    """
    return {"provision_timeout": getattr(args, "wait", None)}

def setup_logging(level, verbose=False):
    """
    setup_logging: configures the root logger for the command line
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s",
    )

def prepare_cmd_create(subparsers):
    """
    prepare_cmd_create: prepares parser for subcommand and args for `create`
    """
    create_p = subparsers.add_parser("create", help="Create a cluster")
    create_sub = create_p.add_subparsers(dest="resource", required=True)
    cluster_p = create_sub.add_parser("cluster", help="Create a new cluster")
    cluster_p.add_argument("--name", help=f"Cluster name (default: name in config or '{DEFAULT_CLUSTER_NAME}')")
    cluster_p.add_argument("--config", help="Path to a cluster config file")
    cluster_p.add_argument("--image", help="Node image used where the config names none")
    cluster_p.add_argument("--wait", type=float,
                           help="Seconds to wait for all nodes to be ready")
    cluster_p.add_argument(
        "--dry-run", "-n",
        action="store_true",
        help="Show what would be done without applying changes"
    )

def cmd_create(args, provider, settings):
    """
    cmd_create: handles 'create cluster' command
    """
    try:
        spec = ClusterConfig(args.config).load(
            default_image=args.image or settings.default_node_image,
            name=args.name,
        )
    except PodlabError as e:
        error(f"Failed to load cluster config: {e}")
        return 1

    existing = []
    if not args.dry_run:
        try:
            existing = provider.list_clusters()
        except PodlabError as e:
            error(f"{e}")
            return 1
    if spec.name in existing:
        error(f"Cluster '{spec.name}' already exists")
        return 1

    info(f"Creating cluster '{spec.name}' ...")
    try:
        applied = provider.provision(spec.name, spec, dry_run=args.dry_run)
    except RuntimeError as e:
        error(f"Failed to create cluster: {e}")
        if not isinstance(e, (UnknownRole, InvalidMountPath)):
            # node threads are not cancelled, the process exits once they end
            info("Waiting for remaining nodes to finish ...")
        return 1

    if applied:
        success(f"Cluster '{spec.name}' is ready")
    return 0

def prepare_cmd_delete(subparsers):
    """
    prepare_cmd_delete: prepares parser for subcommand and args for `delete`
    """
    delete_p = subparsers.add_parser("delete", aliases=['rm'], help="Delete a cluster")
    delete_sub = delete_p.add_subparsers(dest="resource", required=True)
    cluster_p = delete_sub.add_parser("cluster", help="Delete a cluster")
    cluster_p.add_argument("--name", default=DEFAULT_CLUSTER_NAME, help="Cluster name")

def cmd_delete(args, provider):
    """
    cmd_delete: handles 'delete cluster' command
    """
    try:
        nodes = provider.list_nodes(args.name)
        if not nodes:
            warning(f"No nodes found for cluster '{args.name}'")
            return 0
        provider.delete_nodes(nodes)
    except RuntimeError as e:
        error(f"Failed to delete cluster: {e}")
        return 1
    success(f"Deletion of {len(nodes)} node(s) of cluster '{args.name}' requested")
    return 0

def prepare_cmd_get(subparsers):
    """
    prepare_cmd_get: prepares parser for subcommand and args for `get`
    """
    get_p = subparsers.add_parser("get", help="Show clusters, nodes or endpoints")
    get_sub = get_p.add_subparsers(dest="resource", required=True)
    get_sub.add_parser("clusters", help="List clusters")
    nodes_p = get_sub.add_parser("nodes", help="List nodes of a cluster")
    nodes_p.add_argument("--name", default=DEFAULT_CLUSTER_NAME, help="Cluster name")
    endpoint_p = get_sub.add_parser("endpoint", help="Show the API server endpoint")
    endpoint_p.add_argument("--name", default=DEFAULT_CLUSTER_NAME, help="Cluster name")

def cmd_get(args, provider):
    """
    cmd_get: handles 'get' command
    """
    try:
        match args.resource:
            case "clusters":
                clusters = provider.list_clusters()
                if not clusters:
                    info("No clusters found")
                for name in clusters:
                    print(name)
            case "nodes":
                nodes = provider.list_nodes(args.name)
                if not nodes:
                    info(f"No nodes found for cluster '{args.name}'")
                    return 0
                heading(f"Nodes of cluster '{args.name}'")
                for node in nodes:
                    print(f"  {node}")
            case "endpoint":
                print(provider.get_api_server_endpoint(args.name))
    except RuntimeError as e:
        error(f"{e}")
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
