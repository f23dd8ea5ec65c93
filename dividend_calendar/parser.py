from typing import Union

from bs4 import BeautifulSoup


def parse_document(raw: Union[bytes, str]) -> BeautifulSoup:
    return BeautifulSoup(raw, "lxml")


def text_of(node) -> str:
    if node is None:
        return ""
    return node.get_text(strip=True)
