"""Context menu actions."""

from enum import Enum


class MenuAction(Enum):
    CANCEL = "cancel"

    VIEW_LABELS = "view_labels"
    VIEW_DETAILS = "view_details"
    VIEW_SUBNETS = "view_subnets"
    VIEW_RULES = "view_rules"
    VIEW_TARGETS = "view_targets"
    VIEW_SERVICES = "view_services"

    COPY_ID = "copy_id"
    COPY_NAME = "copy_name"
    COPY_PUBLIC_IP = "copy_public_ip"
    COPY_PUBLIC_IPV6 = "copy_public_ipv6"
    COPY_PRIVATE_IP = "copy_private_ip"
    COPY_IP_RANGE = "copy_ip_range"
    COPY_FLOATING_IP = "copy_ip"
    COPY_SERVER_ID = "copy_server_id"
    COPY_SERVER_NAME = "copy_server_name"

    SSH_TMUX_WINDOW = "ssh_tmux_window"
    SSH_TMUX_PANE = "ssh_tmux_pane"
    SSH_ZELLIJ_TAB = "ssh_zellij_tab"
    SSH_ZELLIJ_PANE = "ssh_zellij_pane"
    SSH_NEW_TERMINAL = "ssh_new_terminal"
    SSH_CURRENT_TERMINAL = "ssh_current_terminal"

    CREATE_SNAPSHOT = "create_snapshot"

    @property
    def is_copy(self) -> bool:
        return self.value.startswith("copy_")

    @property
    def is_shell(self) -> bool:
        return self.value.startswith("ssh_")
