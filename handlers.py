# handlers.py

import logging
import subprocess
from typing import Any, List
from urllib.parse import quote

from interface import Interface, define_interface
from registry import Device

INTERFACE_NAME = 'org.kde.krunner1'
MATCH_PREFIX = 'def '
ICON_NAME = 'internet-web-browser'
EXACT_MATCH = 100
DEFINITION_URL = 'https://www.cnrtl.fr/definition/{}'
OPEN_COMMAND = 'xdg-open'


class HandlerContext:
    def __init__(self, device: Device, args: List[Any]):
        self.device = device
        self.args = args


def handle_actions(ctx: HandlerContext) -> List[Any]:
    """
    Actions() -> a(sss)
    No extra actions are offered on matches.
    """
    return [[]]


def handle_match(ctx: HandlerContext) -> List[Any]:
    """
    Match(query) -> a(sssida{sv})
      • queries starting with 'def ' yield one result for the remaining word
      • anything else yields no results
    """
    query = ctx.args[0]
    if not query.startswith(MATCH_PREFIX):
        return [[]]
    word = query
    while word.startswith(MATCH_PREFIX):
        word = word[len(MATCH_PREFIX):]
    return [[(word, f"Definition: {word}", ICON_NAME, EXACT_MATCH, 1.0, {})]]


def handle_run(ctx: HandlerContext) -> List[Any]:
    """
    Run(matchId, actionId) -> ()
    Open the definition page for matchId in the browser. actionId is ignored.
    """
    match_id = ctx.args[0]
    open_definition(match_id)
    return []


def open_definition(word: str) -> None:
    url = DEFINITION_URL.format(quote(word, safe=''))
    logging.info(f"Opening {url}")
    try:
        # the URL is one argv element, no sh -c
        result = subprocess.run(
            [OPEN_COMMAND, url],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError as e:
        logging.warning(f"Failed to launch {OPEN_COMMAND}: {e}")
        return
    if result.returncode != 0:
        logging.warning(f"{OPEN_COMMAND} exited with status {result.returncode}")


def create_interface() -> Interface:
    return (
        define_interface(INTERFACE_NAME)
        .add_operation('Actions', [], ['a(sss)'], handle_actions)
        .add_operation('Run', ['s', 's'], [], handle_run)
        .add_operation('Match', ['s'], ['a(sssida{sv})'], handle_match)
        .build()
    )
