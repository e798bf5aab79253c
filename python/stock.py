#!/usr/bin/env python3

from __future__ import (
    annotations,
)

import sys
from typing import Optional, Sequence

from api.archive_client import ArchiveClient
from cli_args import CommandLineArgs
from colored_logger import get_colored_logger, setup_colored_logging
from fragment_renderer import FragmentRenderer
from io_ops.mirror_store import MirrorStore
from prompts import PromptSession, collect_repository_reference
from search import Corpus, find_matches, load_corpus
from settings import Settings
from sync import ReferenceStore, SyncController, SyncError

logger = get_colored_logger(__name__)


def main(
    argv: Optional[Sequence[str]] = None,
    renderer: Optional[FragmentRenderer] = None,
    session: Optional[PromptSession] = None,
) -> int:
    """
    Orchestrates a stock run:
    1. Parse CLI args and resolve settings
    2. Re-sync the mirror if --update was given
    3. Run first-time setup if there is no mirror yet
    4. Load the corpus
    5. Answer a one-shot query, or loop over interactive queries

    Returns the process exit code.
    """
    cli_args = CommandLineArgs(argv)
    settings = Settings(state_dir=cli_args.home, request_timeout=cli_args.timeout)
    setup_colored_logging(level="DEBUG" if cli_args.verbose else settings.log_level)

    renderer = renderer or FragmentRenderer()
    session = session or PromptSession(renderer.console)
    store = MirrorStore(settings.state_dir)
    controller = _build_controller(settings, store)
    banner_shown = False

    try:
        if cli_args.update and store.exists():
            _update_mirror(controller, renderer)

        if not store.exists():
            renderer.banner()
            banner_shown = True
            if not _run_setup(controller, store, renderer, session):
                return 1

        corpus = _load_corpus(settings)

        if cli_args.has_query:
            _print_matches(corpus, cli_args.query, renderer)
            return 0

        if not banner_shown:
            renderer.banner()
        _query_loop(corpus, renderer, session)
        return 0

    except SyncError as e:
        logger.failure("%s", e)
        return 1
    except KeyboardInterrupt:
        logger.notice("Operation cancelled by user")
        return 1


def _build_controller(settings: Settings, store: MirrorStore) -> SyncController:
    return SyncController(
        store=store,
        references=ReferenceStore(settings.config_file),
        client=ArchiveClient(settings.archive_suffix, settings.request_timeout),
        chunk_size=settings.chunk_size,
    )


def _update_mirror(controller: SyncController, renderer: FragmentRenderer) -> None:
    """
    Re-download the mirror from the stored reference.

    ConfigMissing is raised before any network traffic if the record is gone.
    """
    ref = controller.load_reference()
    with renderer.status("Updating stock repository..."):
        controller.fetch_and_install(ref)


def _run_setup(
    controller: SyncController,
    store: MirrorStore,
    renderer: FragmentRenderer,
    session: PromptSession,
) -> bool:
    """
    Ask for the repository, install it, and record the reference.

    A failed or interrupted first install removes whatever was created, so
    the next run starts setup again instead of treating an empty directory
    as a mirror.
    """
    try:
        ref = collect_repository_reference(session)
    except (EOFError, KeyboardInterrupt):
        logger.notice("Setup cancelled.")
        return False

    try:
        with renderer.status("Downloading stock repository..."):
            controller.fetch_and_install(ref)
        controller.persist_reference(ref)
    except BaseException:
        if store.exists():
            store.discard()
        raise

    return True


def _load_corpus(settings: Settings) -> Corpus:
    # the config record holds the token and must never be searchable
    return load_corpus(
        settings.state_dir,
        exclude=(settings.config_file, settings.settings_file, settings.scratch_dir),
    )


def _print_matches(corpus: Corpus, query: str, renderer: FragmentRenderer) -> int:
    count = 0
    for fragment in find_matches(corpus, query):
        renderer.render(fragment)
        count += 1
    logger.debug("%d match(es) for %r", count, query)
    return count


def _query_loop(corpus: Corpus, renderer: FragmentRenderer, session: PromptSession) -> None:
    while True:
        try:
            query = session.read_query()
        except (EOFError, KeyboardInterrupt):
            return

        if query:
            _print_matches(corpus, query, renderer)


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
