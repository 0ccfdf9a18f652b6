"""Export configuration issued by a configuration generator.

Holds the upload identifier, the upload destination and the signed URLs
used to poll for the conversion result or an error marker.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

__all__ = ["UploadDestination", "ExportConfiguration"]


@dataclass(frozen=True)
class UploadDestination:
    """Where and how the exported content is uploaded.

    Attributes:
        url: Endpoint receiving the upload
        key: Object key the content is stored under
        fields: Extra signed form fields required by the store
    """

    url: str
    key: str
    fields: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields or {})))


@dataclass(frozen=True)
class ExportConfiguration:
    """Signed configuration for a single export.

    Fetched fresh for every export and never cached. The controller only
    reads it.

    Attributes:
        file_id: Opaque upload identifier, reported with every failure
        destination: Upload destination
        signed_output_url: Where the converted document can be downloaded
        signed_error_list_url: Listing that gains an entry if conversion fails
        signed_output_list_url: Listing that gains an entry once conversion succeeds
    """

    file_id: str
    destination: UploadDestination
    signed_output_url: str
    signed_error_list_url: str
    signed_output_list_url: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ExportConfiguration:
        """Build a configuration from a generator response.

        Accepts the camelCase keys used by the license API, where upload
        form fields sit next to the URLs:

            {"s3UploadIdentifier": "F1", "s3BucketName": "exports",
             "key": "in/F1.json", "AWSAccessKeyId": ..., "policy": ...,
             "signature": ..., "signedOutputUrl": ...,
             "signedErrorListUrl": ..., "signedOutputListUrl": ...}

        Raises:
            KeyError: If a required key is missing
        """
        file_id = data.get("s3UploadIdentifier", data.get("uploadIdentifier"))
        if file_id is None:
            raise KeyError("s3UploadIdentifier")

        upload_url = data.get("uploadUrl")
        if upload_url is None and "s3BucketName" in data:
            upload_url = f"https://{data['s3BucketName']}.s3.amazonaws.com/"

        fields = {
            name: str(data[name])
            for name in ("key", "AWSAccessKeyId", "policy", "signature")
            if name in data
        }

        return cls(
            file_id=str(file_id),
            destination=UploadDestination(
                url=upload_url or "",
                key=str(data.get("key", file_id)),
                fields=fields,
            ),
            signed_output_url=data["signedOutputUrl"],
            signed_error_list_url=data["signedErrorListUrl"],
            signed_output_list_url=data["signedOutputListUrl"],
        )
