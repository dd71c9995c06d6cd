"""Terminal UI: the Textual app and the state renderer."""
