"""
Structured encoding for intermediate and reduce output files

Intermediate files hold a JSON array of {"key": ..., "value": ...} records.
Reduce output files hold one JSON object mapping key to reduced value.
Both are UTF-8 text.
"""

import json
from typing import Dict, Iterable, List

from common.errors import IntermediateDecodeError, OutputDecodeError
from common.keyvalue import KeyValue


class JsonCodec:
    """Encodes key/value records and result tables as JSON"""

    def encode_key_values(self, pairs: Iterable[KeyValue]) -> str:
        """
        Encode intermediate pairs

        Args:
            pairs: KeyValue records in emit order

        Returns:
            JSON array text, one named-field object per pair
        """
        records = [{'key': kv.key, 'value': kv.value} for kv in pairs]
        return json.dumps(records, ensure_ascii=False, separators=(',', ':'))

    def decode_key_values(self, text: str, source: str = None) -> List[KeyValue]:
        """
        Decode intermediate pairs

        Args:
            text: File contents
            source: Path the text came from, used in error messages

        Returns:
            KeyValue records in file order

        Raises:
            IntermediateDecodeError: If the text is not an array of key/value records
        """
        try:
            records = json.loads(text)
        except json.JSONDecodeError as e:
            raise IntermediateDecodeError(f"Invalid JSON in {source}: {e}", source) from e

        if not isinstance(records, list):
            raise IntermediateDecodeError(
                f"Expected a JSON array in {source}, got {type(records).__name__}", source)

        pairs = []
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                raise IntermediateDecodeError(
                    f"Record {index} in {source} is not an object", source)
            try:
                key = record['key']
                value = record['value']
            except KeyError as e:
                raise IntermediateDecodeError(
                    f"Record {index} in {source} is missing field {e}", source) from e
            if not isinstance(key, str) or not isinstance(value, str):
                raise IntermediateDecodeError(
                    f"Record {index} in {source} has a non-string key or value", source)
            try:
                key.encode('utf-8')
                value.encode('utf-8')
            except UnicodeEncodeError as e:
                raise IntermediateDecodeError(
                    f"Record {index} in {source} is not valid UTF-8 text: {e}", source) from e
            pairs.append(KeyValue(key, value))
        return pairs

    def encode_result(self, table: Dict[str, str]) -> str:
        """Encode a result table, keeping the table's key order"""
        return json.dumps(table, ensure_ascii=False, separators=(',', ':'))

    def decode_result(self, text: str, source: str = None) -> Dict[str, str]:
        """
        Decode a reduce output file

        Raises:
            OutputDecodeError: If the text is not a JSON object of strings
        """
        try:
            table = json.loads(text)
        except json.JSONDecodeError as e:
            raise OutputDecodeError(f"Invalid JSON in {source}: {e}", source) from e

        if not isinstance(table, dict):
            raise OutputDecodeError(
                f"Expected a JSON object in {source}, got {type(table).__name__}", source)
        for key, value in table.items():
            if not isinstance(value, str):
                raise OutputDecodeError(f"Value for {key!r} in {source} is not a string", source)
        return table


DEFAULT_CODEC = JsonCodec()
