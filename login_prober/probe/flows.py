"""Login flow templates.

A flow turns a TargetConfig into the ordered list of steps the engine runs.
Both templates share the same shape::

    navigate -> header visible -> open form -> form visible -> credentials
    -> [totp prompt -> totp code] -> header visible -> read text -> logout

and differ only in their default locators and in what happens after the
logout navigation.
"""

from dataclasses import dataclass, fields, replace
from typing import Dict, List, Tuple

from ..config.models import TargetConfig
from .steps import (
    CaptureMilestone,
    Click,
    ConditionalBranch,
    LogStep,
    Navigate,
    ReadText,
    SendKeys,
    Step,
    SubmitTotp,
    WaitVisible,
)
from .timing import Milestone


@dataclass(frozen=True)
class Locators:
    """Resolved element locators for one target."""
    header: str = ""
    login: str = ""
    username: str = ""
    password: str = ""
    submit: str = ""
    totp: str = ""
    expected_text: str = ""
    logout_confirm: str = ""
    logout_done: str = ""

    @classmethod
    def from_target(cls, config: TargetConfig) -> "Locators":
        return cls(
            header=config.expected_header_css_class,
            login=config.login_css_class,
            username=config.username_xpath,
            password=config.password_xpath,
            submit=config.submit_css_class,
            totp=config.totp_xpath,
            expected_text=config.expected_text_css_class,
            logout_confirm=config.logout_confirm_css_class,
            logout_done=config.logout_done_css_class,
        )


class LoginFlow:
    """Base flow template; subclasses set the name and default locators."""

    name = ""
    default_locators = Locators()
    required = ("header", "login", "username", "password", "submit", "expected_text")

    def resolve_locators(self, config: TargetConfig) -> Locators:
        """
        Merge the target's locators over the flow defaults.

        Args:
            config: Target configuration

        Returns:
            Locators: Locators the flow will use

        Raises:
            ValueError: If a locator the flow needs is still empty
        """
        configured = Locators.from_target(config)
        overrides = {
            f.name: getattr(configured, f.name)
            for f in fields(Locators)
            if getattr(configured, f.name)
        }
        locators = replace(self.default_locators, **overrides)

        needed = list(self.required)
        if config.has_totp:
            needed.append("totp")
        missing = [name for name in needed if not getattr(locators, name)]
        if missing:
            raise ValueError(
                f"Target {config.target!r} ({self.name} flow) is missing locators: {', '.join(missing)}"
            )
        return locators

    def build_steps(self, config: TargetConfig) -> List[Step]:
        """
        Build the full step sequence for a target.

        Args:
            config: Target configuration

        Returns:
            List[Step]: Steps starting at the START milestone and ending
            after logout
        """
        loc = self.resolve_locators(config)
        target = config.target

        totp_steps: Tuple[Step, ...] = (
            WaitVisible(loc.totp),
            CaptureMilestone(Milestone.CREDENTIALS),
            LogStep("totp_prompt", "credentials accepted, TOTP prompt visible"),
            SubmitTotp(loc.totp),
            LogStep("totp_submit", "submitting TOTP code"),
            Click(loc.submit),
        )

        steps: List[Step] = [
            CaptureMilestone(Milestone.START),
            LogStep("navigate", f"navigating to login URL of {target}"),
            Navigate(config.url),
            WaitVisible(loc.header),
            CaptureMilestone(Milestone.PAGE_LOAD),
            LogStep("page_load", "login page loaded"),
            Click(loc.login),
            WaitVisible(loc.submit),
            CaptureMilestone(Milestone.FORM_VISIBLE),
            LogStep("form_visible", "login form is visible, submitting credentials"),
            SendKeys(loc.username, config.username),
            SendKeys(loc.password, config.password),
            Click(loc.submit),
            ConditionalBranch(lambda run: run.target.has_totp, totp_steps),
            WaitVisible(loc.header),
            ReadText(loc.expected_text),
            CaptureMilestone(Milestone.LOGIN_DONE),
            LogStep("logged_in", "login successful, navigating to logout URL"),
            Navigate(config.logout_url),
        ]
        steps.extend(self.logout_steps(loc))
        return steps

    def logout_steps(self, locators: Locators) -> List[Step]:
        """Steps run after navigating to the logout URL."""
        return []


class FormLoginFlow(LoginFlow):
    """Form login: every locator comes from the target configuration."""

    name = "form"


class FederatedLoginFlow(LoginFlow):
    """
    Federated login through an identity provider redirect.

    Unconfigured locators fall back to the provider's stock login page, and
    the provider asks for logout confirmation before ending the session.
    """

    name = "federated"
    default_locators = Locators(
        header="header",
        login="a.login-link",
        username="#username",
        password="#password",
        submit="#kc-login",
        totp="#otp",
        expected_text="body",
        logout_confirm="#kc-logout",
        logout_done="#kc-page-title",
    )
    required = LoginFlow.required + ("logout_confirm", "logout_done")

    def logout_steps(self, locators: Locators) -> List[Step]:
        return [
            WaitVisible(locators.logout_confirm),
            Click(locators.logout_confirm),
            WaitVisible(locators.logout_done),
        ]


FLOWS: Dict[str, LoginFlow] = {
    FormLoginFlow.name: FormLoginFlow(),
    FederatedLoginFlow.name: FederatedLoginFlow(),
}


def flow_for(login_type: str) -> LoginFlow:
    """
    Select the flow template for a login type.

    Unknown login types use the form flow; the value is still reported as
    the metric label.
    """
    return FLOWS.get(login_type.strip().lower(), FLOWS[FormLoginFlow.name])
