from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union

JSONValue = Union[str, int, float, bool, None, list["JSONValue"], dict[str, "JSONValue"]]

# Parsed body of the winning source; no schema is assumed beyond "JSON object".
LookupResult = dict[str, JSONValue]


@dataclass(frozen=True)
class SourceDescriptor:
    name: str
    url_template: str

    def endpoint(self, key: object) -> str:
        return self.url_template.format(cep=str(key))


class Fetcher(Protocol):
    def __call__(self, endpoint: str) -> LookupResult: ...


APICEP = SourceDescriptor(name="ApiCep", url_template="https://cdn.apicep.com/file/apicep/{cep}.json")
VIACEP = SourceDescriptor(name="ViaCep", url_template="https://viacep.com.br/ws/{cep}/json/")

DEFAULT_SOURCES: tuple[SourceDescriptor, ...] = (APICEP, VIACEP)
