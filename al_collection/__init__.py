"""AL Development Collection — installer and validator for Copilot customization files."""
