from pathlib import Path

import click
from google.protobuf.compiler import plugin_pb2
from rich.console import Console
from rich.table import Table

from protoc_gen_fastapi import __version__
from protoc_gen_fastapi.api.config import load_options
from protoc_gen_fastapi.api.errors import GenerationError, InvalidOptions
from protoc_gen_fastapi.api.extractors import MessageRegistry, extract_file_schema
from protoc_gen_fastapi.api.gen_logging import configure_gen_logging
from protoc_gen_fastapi.api.generator import build_file_context, generate

# stdout belongs to protoc in plugin mode
err_console = Console(stderr=True)
console = Console()


def run_plugin(stdin=None, stdout=None, verbose=False, quiet=False):
    """Read a CodeGeneratorRequest from stdin and write the response to stdout."""
    stdin = stdin or click.get_binary_stream("stdin")
    stdout = stdout or click.get_binary_stream("stdout")

    request = plugin_pb2.CodeGeneratorRequest.FromString(stdin.read())
    try:
        options = load_options(request.parameter)
    except InvalidOptions as e:
        configure_gen_logging(verbose=verbose, quiet=quiet)
        response = plugin_pb2.CodeGeneratorResponse(error=str(e))
    else:
        configure_gen_logging(options.log_level, verbose=verbose, quiet=quiet)
        response = generate(request, options)

    stdout.write(response.SerializeToString())
    stdout.flush()
    return response


@click.group(invoke_without_command=True, help="protoc plugin generating FastAPI routes from service definitions.")
@click.version_option(__version__, "--version", prog_name="protoc-gen-fastapi", message="%(version)s")
@click.option("-v", "--verbose", is_flag=True, help="Log every route decision to stderr.")
@click.option("-q", "--quiet", is_flag=True, help="Only log errors.")
@click.pass_context
def cli(context, verbose, quiet):
    context.ensure_object(dict)
    context.obj["verbose"] = verbose
    context.obj["quiet"] = quiet
    if context.invoked_subcommand is None:
        run_plugin(verbose=verbose, quiet=quiet)


@cli.command("inspect", help="Print the route table resolved from a serialized CodeGeneratorRequest.")
@click.pass_context
@click.argument("request_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--parameter", default=None, help="Plugin parameter string (defaults to the one in the request).")
def inspect_cmd(context, request_path, parameter):
    configure_gen_logging(
        verbose=context.obj.get("verbose", False),
        quiet=context.obj.get("quiet", False),
    )
    try:
        request = plugin_pb2.CodeGeneratorRequest.FromString(Path(request_path).read_bytes())
        options = load_options(request.parameter if parameter is None else parameter)
        registry = MessageRegistry.from_request(request, strict_tags=options.strict_tags)
        protos = {file_proto.name: file_proto for file_proto in request.proto_file}

        for file_name in request.file_to_generate:
            file_proto = protos.get(file_name)
            if file_proto is None:
                raise GenerationError(f"file to generate '{file_name}' is missing from the request")
            file_schema = extract_file_schema(file_proto)
            file_context = build_file_context(file_schema, registry, options)

            table = Table(title=file_name)
            table.add_column("Verb")
            table.add_column("Path")
            table.add_column("Method")
            table.add_column("Middleware")
            table.add_column("Response")
            for service in file_context["services"]:
                for route, method in zip(service.routes, service.methods):
                    table.add_row(
                        route.binding.verb,
                        route.binding.path,
                        f"{service.full_name}.{route.method_name}",
                        ", ".join(route.middleware),
                        method.output_ref,
                    )
            console.print(table)
    except GenerationError as e:
        err_console.print(f"Inspect failed with error(s): {e}", style="red")
        context.exit(1)
    else:
        context.exit(0)


def main():
    cli(prog_name="protoc-gen-fastapi")
