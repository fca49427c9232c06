"""Decoders for DirectAdmin API bodies.

Legacy CMD_API_* commands answer with a urlencoded string (key=value&...),
or with list[]=a&list[]=b for listings. Newer commands answer with JSON.
The whole body is unquoted once, before splitting, so an encoded "&" inside
a value ends up acting as a separator.
"""
import json
import logging
import urllib.parse
from typing import Dict, List, Union

from .models import DictResponse, HtmlPage, JsonResponse, ListResponse

Decoded = Union[HtmlPage, JsonResponse, ListResponse, DictResponse]


def decode_list(body: str) -> List[str]:
    values: List[str] = []
    for segment in urllib.parse.unquote_plus(body).split("&"):
        _key, _sep, value = segment.partition("=")
        values.append(value)
    return values


def decode_dict(body: str) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for segment in urllib.parse.unquote_plus(body).split("&"):
        key, sep, value = segment.partition("=")
        if not sep:
            # a bare segment has neither key nor value
            key = ""
        # last one wins on duplicates
        values[key] = value
    return values


def decode_response(body: str) -> Decoded:
    if body.startswith("<html"):
        return HtmlPage()
    if body.startswith("{"):
        return JsonResponse(json.loads(body))
    if "list[]" in body:
        logging.debug("[da] Decoding list body (%d bytes)", len(body))
        return ListResponse(decode_list(body))
    return DictResponse(decode_dict(body))
