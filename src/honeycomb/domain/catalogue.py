"""Policy catalogue: short names and the rule that finds each on the wire.

Device-policy restrictions for a user live in the profile XML as

.. code-block:: xml

    <device_policy_local_restrictions>
      <restrictions_user user_id="0">
        <restrictions no_install_unknown_sources="true" no_sms="true" />
      </restrictions_user>
    </device_policy_local_restrictions>

so the default rule is "a boolean attribute named after the policy on a
``<restrictions>`` element directly inside ``<restrictions_user>``".
Rules are data: other layouts (one element per policy, or a generic
keyed ``<setting name=...>`` element) are expressed by a different
:class:`RuleKind`, and extra rules can be loaded from configuration.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from enum import StrEnum

from pydantic import BaseModel

from honeycomb.codec.constants import AttributeType
from honeycomb.codec.encoder import attribute_for, encode_attribute, encode_element
from honeycomb.codec.events import Attribute, StartElement
from honeycomb.codec.intern import InternTable
from honeycomb.errors import UnknownPolicyName

DEFAULT_CONTAINER: tuple[str, ...] = ("restrictions_user", "restrictions")


class RuleKind(StrEnum):
    """How a policy is represented inside its container."""

    ATTRIBUTE = "attribute"
    ELEMENT = "element"
    KEYED_ELEMENT = "keyed_element"


class PolicyRule(BaseModel):
    """Identification rule for one catalogue entry.

    Attributes:
        name: Policy short name (also the attribute/element/key it matches).
        kind: Representation inside the container.
        container: Element-name path suffix identifying the container,
            innermost last.  ``("restrictions_user", "restrictions")``
            matches ``<restrictions>`` whose parent is ``<restrictions_user>``.
        element: Element name for ``keyed_element`` rules.
        key_attribute: Attribute carrying the policy name for ``keyed_element``.
        value_attribute: Attribute written on inserted elements.
        value: Value written when the policy is inserted.
    """

    model_config = {"frozen": True}

    name: str
    kind: RuleKind = RuleKind.ATTRIBUTE
    container: tuple[str, ...] = DEFAULT_CONTAINER
    element: str = "setting"
    key_attribute: str = "name"
    value_attribute: str = "value"
    value: bool | int | float | str = True
    description: str = ""

    def is_container(self, path: Sequence[str]) -> bool:
        """True when the open-element *path* (outermost first) ends with the container."""
        depth = len(self.container)
        return depth > 0 and tuple(path[-depth:]) == self.container

    def matches_attribute(self, attr: Attribute) -> bool:
        return self.kind is RuleKind.ATTRIBUTE and attr.name == self.name

    def matches_element(self, event: StartElement) -> bool:
        if self.kind is RuleKind.ELEMENT:
            return event.name == self.name
        if self.kind is RuleKind.KEYED_ELEMENT:
            if event.name != self.element:
                return False
            key = event.attribute(self.key_attribute)
            return key is not None and key.value == self.name
        return False

    def build_fragment(self, table: InternTable) -> bytes:
        """Encode the bytes that represent this policy being set."""
        if self.kind is RuleKind.ATTRIBUTE:
            return encode_attribute(attribute_for(self.name, self.value), table)
        value = attribute_for(self.value_attribute, self.value)
        if self.kind is RuleKind.ELEMENT:
            return encode_element(self.name, [value], table=table)
        key = Attribute(self.key_attribute, AttributeType.STRING, self.name)
        return encode_element(self.element, [key, value], table=table)


# Android UserManager restriction keys, in declaration order.
DEFAULT_POLICY_NAMES: tuple[str, ...] = (
    "no_config_wifi",
    "no_change_wifi_state",
    "no_wifi_tethering",
    "no_wifi_direct",
    "no_add_wifi_config",
    "no_sharing_admin_configured_wifi",
    "no_modify_accounts",
    "no_install_apps",
    "no_install_unknown_sources",
    "no_install_unknown_sources_globally",
    "no_uninstall_apps",
    "no_share_location",
    "no_config_location",
    "no_airplane_mode",
    "no_config_brightness",
    "no_ambient_display",
    "no_config_screen_timeout",
    "no_config_bluetooth",
    "no_bluetooth",
    "no_bluetooth_sharing",
    "no_usb_file_transfer",
    "no_config_credentials",
    "no_remove_user",
    "no_remove_managed_profile",
    "no_debugging_features",
    "no_config_vpn",
    "no_config_date_time",
    "no_config_tethering",
    "no_network_reset",
    "no_factory_reset",
    "no_add_user",
    "no_add_managed_profile",
    "no_add_clone_profile",
    "ensure_verify_apps",
    "no_config_cell_broadcasts",
    "no_config_mobile_networks",
    "no_control_apps",
    "no_physical_media",
    "no_unmute_microphone",
    "no_adjust_volume",
    "no_outgoing_calls",
    "no_sms",
    "no_fun",
    "no_create_windows",
    "no_system_error_dialogs",
    "no_cross_profile_copy_paste",
    "no_outgoing_beam",
    "no_wallpaper",
    "no_set_wallpaper",
    "no_safe_boot",
    "no_record_audio",
    "no_run_in_background",
    "no_camera",
    "no_unmute_device",
    "no_data_roaming",
    "no_set_user_icon",
    "no_oem_unlock",
    "no_unified_password",
    "allow_parent_profile_app_linking",
    "no_autofill",
    "no_content_capture",
    "no_content_suggestions",
    "no_user_switch",
    "no_sharing_into_profile",
    "no_printing",
    "disallow_config_private_dns",
    "disallow_microphone_toggle",
    "disallow_camera_toggle",
    "no_config_locale",
    "no_cellular_2g",
    "no_ultra_wideband_radio",
    "no_grant_admin",
    "no_near_field_communication_radio",
)


class PolicyCatalogue:
    """Ordered, read-only mapping of policy short name -> :class:`PolicyRule`."""

    def __init__(self, rules: Iterable[PolicyRule]) -> None:
        self._rules: dict[str, PolicyRule] = {}
        for rule in rules:
            self._rules[rule.name] = rule

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __iter__(self) -> Iterator[PolicyRule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def names(self) -> list[str]:
        return list(self._rules)

    def get(self, name: str) -> PolicyRule:
        try:
            return self._rules[name]
        except KeyError:
            msg = f"Unknown policy {name!r} (see 'honeycomb policies' for the catalogue)"
            raise UnknownPolicyName(msg, policy=name) from None

    def extended(self, rules: Iterable[PolicyRule]) -> PolicyCatalogue:
        """New catalogue with *rules* appended; same-named rules replace in place."""
        return PolicyCatalogue([*self._rules.values(), *rules])

    def with_container(self, container: tuple[str, ...]) -> PolicyCatalogue:
        """New catalogue whose default-container rules use *container* instead."""
        return PolicyCatalogue(
            rule.model_copy(update={"container": container})
            if rule.container == DEFAULT_CONTAINER
            else rule
            for rule in self._rules.values()
        )


DEFAULT_CATALOGUE = PolicyCatalogue(PolicyRule(name=name) for name in DEFAULT_POLICY_NAMES)


def list_policies(catalogue: PolicyCatalogue | None = None) -> list[str]:
    """All known policy short names in catalogue order."""
    return (catalogue if catalogue is not None else DEFAULT_CATALOGUE).names()
