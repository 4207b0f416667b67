import io
import os
from abc import ABC, abstractmethod
from pathlib import Path

from flask import current_app


class Storage(ABC):
    def __init__(self, volume: str, base_path: str = ""):
        """
        Initialize a storage instance.

        Args:
            volume (str): Root directory or mount point for storage.
            base_path (str): Subdirectory inside the volume to store files.
        """
        self.volume = volume
        self.base_path = base_path

    def _get_bytes(self, content):
        """
        Convert the input content to bytes.

        Args:
            content (bytes | BytesIO | file-like): The file content.

        Returns:
            bytes: The content as bytes.
        """
        if isinstance(content, io.BytesIO):
            return content.getvalue()
        elif isinstance(content, bytes):
            return content
        elif hasattr(content, "read"):
            return content.read()
        else:
            raise TypeError(
                "Unsupported content. Must be bytes, BytesIO or a readable stream."
            )

    @abstractmethod
    def save(self, content, filepath: str, content_type: str | None = None) -> str:
        """
        Save a file to the storage system.

        Args:
            content: The file content.
            filepath (str): Relative file path where the file should be stored.
            content_type (str | None): MIME type of the file, optional.

        Returns:
            str: The relative path the file was stored under.

        Raises:
            IOError: If saving the file fails.
        """
        raise NotImplementedError("Subclasses must implement this method.")

    @abstractmethod
    def exists(self, filepath: str) -> bool:
        raise NotImplementedError("Subclasses must implement this method.")

    @abstractmethod
    def delete(self, filepath: str) -> None:
        raise NotImplementedError("Subclasses must implement this method.")

    @abstractmethod
    def get_path(self, filepath: str) -> str:
        """
        Get the full path to a file in the storage system.

        Args:
            filepath (str): Relative file path.

        Returns:
            str: Full path to the file in the storage system.
        """
        raise NotImplementedError("Subclasses must implement this method.")

    @abstractmethod
    def get_url(self, filepath: str) -> str:
        """
        Get the URL for accessing a file in the storage system.

        Args:
            filepath (str): Relative file path.

        Returns:
            str: URL to access the file.
        """
        raise NotImplementedError("Subclasses must implement this method.")


class FileSystemStorage(Storage):
    def __init__(self, volume, base_path="", url_prefix=None):
        super().__init__(volume, base_path)
        self.url_prefix = (url_prefix or "").rstrip("/")

    def _full_path(self, filepath):
        root = (Path(self.volume) / self.base_path).resolve()
        full_path = (root / filepath.lstrip("/")).resolve()
        # Never read or write outside the storage root
        if root != full_path and root not in full_path.parents:
            raise IOError(f"Refusing path outside storage root: {filepath}")
        return full_path

    def save(self, content, filepath, content_type=None):
        """
        Save a file buffer to the local filesystem at volume/base_path/filepath.

        Raises:
            IOError: If the file could not be written.
        """
        full_path = self._full_path(filepath)

        try:
            # Ensure the parent directories exist
            full_path.parent.mkdir(parents=True, exist_ok=True)

            with open(full_path, "wb") as f:
                f.write(self._get_bytes(content))

        except OSError as e:
            raise IOError(f"Failed to save file to {full_path}: {e}") from e

        return filepath.lstrip("/")

    def exists(self, filepath):
        try:
            return self._full_path(filepath).is_file()
        except IOError:
            return False

    def delete(self, filepath):
        full_path = self._full_path(filepath)
        if full_path.is_file():
            os.remove(full_path)

    def get_path(self, filepath):
        return str(self._full_path(filepath))

    def get_url(self, filepath):
        filepath = filepath.lstrip("/")
        if self.url_prefix:
            return f"{self.url_prefix}/{filepath}"
        return filepath


def init_storage(app):
    storage = FileSystemStorage(
        volume=app.config["UPLOAD_ROOT"],
        url_prefix=app.config.get("STORAGE_URL_PREFIX"),
    )
    app.extensions["storage"] = storage
    return storage


def get_storage() -> Storage:
    return current_app.extensions["storage"]
