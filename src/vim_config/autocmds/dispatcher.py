"""Autocommand dispatcher: groups, rules and synchronous event firing."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, Iterator, Mapping, Optional

from vim_config.actions import Callback, Command, coerce_action
from vim_config.errors import ActionInvocationError, GroupNotFoundError
from vim_config.runtime.telemetry import record_event, span

from .models import (
    AutocmdGroup,
    AutocmdRule,
    Event,
    EventContext,
    RuleHandle,
    parse_events,
    parse_patterns,
)

CommandExecutor = Callable[[str, EventContext], object]
ErrorReporter = Callable[[ActionInvocationError], None]


@dataclass(slots=True)
class DispatchReport:
    """What happened during a single ``fire`` call."""

    event: Event
    context: EventContext
    invoked: list[int] = field(default_factory=list)
    failures: list[ActionInvocationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def count(self) -> int:
        return len(self.invoked)


@dataclass(slots=True)
class DispatcherStats:
    group_count: int
    rule_count: int
    groups: tuple[str, ...]


class AutocmdDispatcher:
    """Registers rules per group and invokes them when events fire.

    Rules run in registration order across all groups. An action that raises
    is wrapped in ``ActionInvocationError``, logged, handed to ``on_error``
    and recorded on the report; later rules still run.
    """

    def __init__(
        self,
        *,
        executor: CommandExecutor | None = None,
        on_error: ErrorReporter | None = None,
        logger_name: str | None = None,
    ) -> None:
        self._executor = executor
        self._on_error = on_error
        self._logger_name = logger_name
        self._groups: Dict[str, AutocmdGroup] = {}
        self._rules: list[AutocmdRule] = []
        self._next_id = 1

    def define_group(self, name: str, clear: bool = True) -> AutocmdGroup:
        """Create ``name`` or, if it exists and ``clear`` is set, retire its rules."""

        with span(
            "autocmds::define_group",
            logger_name=self._logger_name,
            component="autocmds",
            metadata={"group": name, "clear": clear},
        ) as handle:
            group = self._groups.get(name)
            if group is None:
                group = AutocmdGroup(name=name, clear=clear)
                self._groups[name] = group
                return group
            group.clear = clear
            if clear:
                retired = self._retire_group_rules(group)
                handle.add_metadata("retired", retired)
            return group

    def get_group(self, name: str) -> AutocmdGroup:
        try:
            return self._groups[name]
        except KeyError:
            raise GroupNotFoundError(name) from None

    def clear_group(self, name: str) -> int:
        """Retire every rule in ``name``; returns how many were retired."""

        group = self.get_group(name)
        with span(
            "autocmds::clear_group",
            logger_name=self._logger_name,
            component="autocmds",
            metadata={"group": name},
        ):
            return self._retire_group_rules(group)

    def delete_group(self, name: str) -> None:
        group = self.get_group(name)
        with span(
            "autocmds::delete_group",
            logger_name=self._logger_name,
            component="autocmds",
            metadata={"group": name},
        ):
            self._retire_group_rules(group)
            group.deleted = True
            del self._groups[name]

    def add_rule(
        self,
        group: AutocmdGroup | str,
        events: Event | str | Iterable[Event | str],
        pattern: str | Iterable[str] | None,
        action: object,
        *,
        once: bool = False,
        description: str = "",
    ) -> RuleHandle:
        owner = self._require_group(group)
        parsed_events = parse_events(events)
        patterns = parse_patterns(pattern)
        with span(
            "autocmds::add_rule",
            logger_name=self._logger_name,
            component="autocmds",
            metadata={
                "group": owner.name,
                "events": sorted(event.value for event in parsed_events),
                "pattern": ",".join(patterns),
            },
        ) as handle:
            rule = AutocmdRule(
                id=self._next_id,
                group=owner,
                events=parsed_events,
                patterns=patterns,
                action=coerce_action(action),
                once=once,
                description=description,
                generation=owner.generation,
            )
            self._next_id += 1
            self._rules.append(rule)
            handle.add_metadata("rule_id", rule.id)
            return rule

    def remove_rule(self, rule: RuleHandle) -> bool:
        if not rule.active:
            return False
        rule.retired = True
        self._compact()
        return True

    def fire(
        self,
        event: Event | str,
        context: EventContext | Mapping[str, object] | None = None,
        **fields: object,
    ) -> DispatchReport:
        """Invoke every active rule matching ``event`` and its subject, in order."""

        ctx = _build_context(Event.parse(event), context, fields)
        report = DispatchReport(event=ctx.event, context=ctx)
        with span(
            "autocmds::fire",
            logger_name=self._logger_name,
            component="autocmds",
            metadata={"event": ctx.event.value, "match": ctx.match},
        ) as handle:
            # Snapshot: rules registered by an action wait for the next fire.
            for rule in list(self._rules):
                if not rule.active:
                    continue
                matched = rule.match(ctx)
                if matched is None:
                    continue
                if rule.once:
                    # Retire first so a nested fire of the same event cannot re-run it.
                    rule.retired = True
                rule.fired += 1
                report.invoked.append(rule.id)
                try:
                    self._invoke(rule, replace(ctx, pattern=matched))
                except Exception as exc:
                    failure = ActionInvocationError(rule, ctx)
                    failure.__cause__ = exc
                    report.failures.append(failure)
                    self._report_failure(failure, exc)
            handle.add_metadata("invoked", report.count)
            if report.failures:
                handle.add_metadata("failures", len(report.failures))
            self._compact()
        return report

    def iter_rules(
        self,
        group: AutocmdGroup | str | None = None,
        event: Event | str | None = None,
    ) -> Iterator[AutocmdRule]:
        owner = self._require_group(group) if group is not None else None
        wanted = Event.parse(event) if event is not None else None
        for rule in self._rules:
            if not rule.active:
                continue
            if owner is not None and rule.group is not owner:
                continue
            if wanted is not None and wanted not in rule.events:
                continue
            yield rule

    def stats(self) -> DispatcherStats:
        return DispatcherStats(
            group_count=len(self._groups),
            rule_count=sum(1 for rule in self._rules if rule.active),
            groups=tuple(self._groups),
        )

    def _require_group(self, group: AutocmdGroup | str) -> AutocmdGroup:
        if isinstance(group, AutocmdGroup):
            if group.deleted or self._groups.get(group.name) is not group:
                raise GroupNotFoundError(group.name)
            return group
        return self.get_group(group)

    def _retire_group_rules(self, group: AutocmdGroup) -> int:
        retired = sum(1 for rule in self._rules if rule.group is group and rule.active)
        group.generation += 1
        self._compact()
        return retired

    def _compact(self) -> None:
        self._rules = [rule for rule in self._rules if rule.active]

    def _invoke(self, rule: AutocmdRule, context: EventContext) -> None:
        action = rule.action
        if isinstance(action, Callback):
            action(context)
        elif isinstance(action, Command):
            if self._executor is None:
                raise RuntimeError(f"No command executor for '{action.text}'")
            self._executor(action.text, context)

    def _report_failure(self, failure: ActionInvocationError, exc: Exception) -> None:
        rule = failure.rule
        record_event(
            "autocmds.action_failed",
            level="error",
            data={
                "rule_id": rule.id,
                "group": rule.group.name,
                "event": failure.context.event.value,
                "match": failure.context.match,
                "action": rule.action.label,
                "error": f"{type(exc).__name__}: {exc}",
            },
            logger_name=self._logger_name,
        )
        if self._on_error is None:
            return
        try:
            self._on_error(failure)
        except Exception as channel_exc:
            record_event(
                "autocmds.error_report_failed",
                level="error",
                data={
                    "rule_id": rule.id,
                    "group": rule.group.name,
                    "error": f"{type(channel_exc).__name__}: {channel_exc}",
                },
                logger_name=self._logger_name,
            )


def _build_context(
    event: Event,
    context: EventContext | Mapping[str, object] | None,
    fields: Mapping[str, object],
) -> EventContext:
    if isinstance(context, EventContext):
        if fields:
            return replace(context, event=event, **fields)  # type: ignore[arg-type]
        return replace(context, event=event)
    merged: Dict[str, object] = dict(context or {})
    merged.update(fields)
    merged.pop("event", None)
    if "bufferId" in merged:
        merged.setdefault("buffer", merged.pop("bufferId"))
    if "matchedPattern" in merged:
        merged.setdefault("pattern", merged.pop("matchedPattern"))
    return EventContext(event=event, **merged)  # type: ignore[arg-type]


__all__ = [
    "AutocmdDispatcher",
    "CommandExecutor",
    "DispatchReport",
    "DispatcherStats",
    "ErrorReporter",
]
