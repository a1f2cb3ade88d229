"""
Base credential class that all credential types should inherit from.
"""
from typing import Any, ClassVar, Dict, List


class BaseCredential:
    """Base class for all credential types"""

    # Class variables to be overridden by subclasses
    name: ClassVar[str] = ""
    display_name: ClassVar[str] = ""
    properties: ClassVar[List[Dict[str, Any]]] = []

    def __init__(self, data: Dict[str, Any]):
        """
        Initialize with credential data

        Args:
            data: Dictionary containing decrypted credential values
        """
        self.data = data

    @classmethod
    def get_definition(cls) -> Dict[str, Any]:
        """Get the credential type definition for registration"""
        return {
            "name": cls.name,
            "display_name": cls.display_name,
            "properties": cls.properties,
        }

    def test(self) -> Dict[str, str]:
        """
        Test if the credential is valid

        Returns:
            Dictionary with ``status`` ("OK" or "Error") and ``message``
        """
        raise NotImplementedError("Test method not implemented")

    def validate(self) -> Dict[str, Any]:
        """
        Validate that all required properties are provided

        Returns:
            Dictionary with validation results
        """
        missing_fields = [
            prop["name"]
            for prop in self.properties
            if prop.get("required", False) and not self.data.get(prop["name"])
        ]

        if missing_fields:
            return {
                "valid": False,
                "message": f"Missing required fields: {', '.join(missing_fields)}"
            }

        return {"valid": True}

    def get_auth_headers(self) -> Dict[str, str]:
        """Headers that authenticate a request with this credential"""
        raise NotImplementedError("get_auth_headers not implemented")
