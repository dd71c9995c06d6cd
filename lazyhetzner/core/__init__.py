"""State machine, command executor and the message loop."""
