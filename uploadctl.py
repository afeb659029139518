#!/usr/bin/env python3
import argparse
import asyncio
import sys

from src.client.upload_api_client import UploadApiClient, get_api_url
from src.client.upload_orchestrator import UploadOrchestrator
from src.models.file_upload import BatchResult
from src.models.pending_file import PendingFile
from src.models.upload_status import UploadStatus


def print_status(pending_file: PendingFile, status: UploadStatus):
    if status.is_terminal:
        print(f"{status.state.value:>9}  {pending_file.name}", file=sys.stderr)


def print_batch_result(batch_result: BatchResult):
    print(batch_result.model_dump_json(indent=2, by_alias=True))


async def send_files(paths: list[str], url: str, max_concurrency: int | None = None) -> BatchResult:
    async with UploadApiClient(url) as api_client:
        orchestrator = UploadOrchestrator(api_client, status_listener=print_status, max_concurrency=max_concurrency)
        orchestrator.add(PendingFile.from_path(path) for path in paths)
        return await orchestrator.submit_all()


def cmd_send(args: argparse.Namespace, **kwargs) -> int:
    batch_result = asyncio.run(send_files(args.paths, args.url, args.max_concurrency))
    print_batch_result(batch_result)
    return 1 if batch_result.has_failures() else 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description='Upload files to the batch upload API')
    subparsers = parser.add_subparsers(title='subcommands', dest='subcommand', required=True)

    send_parser = subparsers.add_parser('send', help='Upload files, one request per file')
    send_parser.add_argument('paths', nargs='+', help='Files to upload')
    send_parser.add_argument('--url', type=str, default=get_api_url(), help='Base URL of the upload API')
    send_parser.add_argument(
        '--max-concurrency', type=int, default=None,
        help='Maximum number of uploads in flight, unlimited by default'
    )
    send_parser.set_defaults(func=cmd_send)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
