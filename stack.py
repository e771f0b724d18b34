# stack.py
# Bounded LIFO stack engine with a few narrated scenarios

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from operation import Engine, Operation, OperationResult, Outcome, done, failed
from settings import STACK_CAPACITY
from steps import ACTIVE, IdSource, StepRecorder

PUSHING = "pushing"
POPPING = "popping"
PEEK = "peek"
OVERFLOW = "overflow"
SUCCESS = "success"

KINDS = ("default", "url", "code", "paren")


@dataclass
class StackItem:
    id: str
    value: object
    kind: str = "default"


class Stack(Engine):
    feature = "stack"
    context = "Stack (LIFO). Push, pop, peek, overflow and underflow."

    def __init__(self, capacity: int = STACK_CAPACITY, **kwargs):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        super().__init__(**kwargs)
        self.capacity = capacity
        self.items: List[StackItem] = []
        self._new_id = IdSource("s")
        self.message = "Ready to Stack"

    # --- state ---

    def snapshot(self) -> dict:
        return {
            "capacity": self.capacity,
            "items": [{"id": i.id, "value": i.value, "kind": i.kind} for i in self.items],
        }

    def aux(self) -> dict:
        return {"size": len(self.items), "top": self.items[-1].value if self.items else None}

    def values(self) -> list:
        return [item.value for item in self.items]

    def __len__(self) -> int:
        return len(self.items)

    @property
    def top(self) -> Optional[StackItem]:
        return self.items[-1] if self.items else None

    def ids_with_value(self, value) -> List[str]:
        return [i.id for i in self.items if str(i.value) == str(value)]

    # --- public operations ---

    def push(self, value, kind: str = "default") -> Operation:
        if kind not in KINDS:
            raise ValueError(f"unknown item kind: {kind}")
        return self._begin(f"push {value}", lambda rec: self._push(rec, value, kind))

    def pop(self) -> Operation:
        return self._begin("pop", self._pop)

    def peek(self) -> Operation:
        return self._begin("peek", self._peek)

    def clear(self) -> OperationResult:
        def action():
            self.items.clear()
            return done("Stack cleared.")

        return self._sync("clear", action)

    def build(self, values: Sequence) -> OperationResult:
        def action():
            self.items = [StackItem(self._new_id(), v) for v in list(values)[: self.capacity]]
            return done(f"Built stack with {len(self.items)} items.")

        return self._sync("build", action)

    def scenario(self, name: str) -> Operation:
        scenarios = {
            "browser": self._browser,
            "recursion": self._recursion,
            "parentheses": self._parentheses,
        }
        if name not in scenarios:
            raise ValueError(f"unknown scenario: {name}")
        return self._begin(f"scenario {name}", scenarios[name])

    # --- step generators ---

    def _push(self, rec: StepRecorder, value, kind: str = "default"):
        if len(self.items) >= self.capacity:
            top = self.top.id if self.top else None
            yield self._step(rec, {top: OVERFLOW}, message="Stack Overflow! Maximum capacity reached.", delay=1000)
            self._play("error")
            return failed(Outcome.OVERFLOW, "Stack Overflow! Maximum capacity reached.")

        top = self.top.id if self.top else None
        yield self._step(rec, pointers={"top": top}, message=f'Pushing "{value}" to stack...',
                         delay=self.step_delay / 2)
        item = StackItem(self._new_id(), value, kind)
        self.items.append(item)
        self._play("push")
        yield self._step(rec, {item.id: PUSHING}, {"top": item.id}, f'Placed "{value}" on top',
                         delay=self.step_delay / 2)
        yield self._step(rec, {item.id: ACTIVE}, {"top": item.id}, f"Item pushed to index {len(self.items) - 1}", delay=0)
        return done(f"Item pushed to index {len(self.items) - 1}", item)

    def _pop(self, rec: StepRecorder):
        if not self.items:
            yield self._step(rec, message="Stack Underflow! Cannot pop from empty stack.", delay=1000)
            self._play("error")
            return failed(Outcome.UNDERFLOW, "Stack Underflow! Cannot pop from empty stack.")

        item = self.items[-1]
        yield self._step(rec, {item.id: POPPING}, {"top": item.id}, f'Popping "{item.value}"...',
                         delay=self.step_delay / 2)
        self.items.pop()
        self._play("pop")
        top = self.top.id if self.top else None
        yield self._step(rec, pointers={"top": top}, message=f'Popped "{item.value}"', delay=self.step_delay / 2)
        return done(f'Popped "{item.value}"', item)

    def _peek(self, rec: StepRecorder):
        if not self.items:
            yield self._step(rec, message="Stack is empty.", delay=0)
            return failed(Outcome.UNDERFLOW, "Stack is empty.")

        item = self.items[-1]
        yield self._step(rec, {item.id: PEEK}, {"top": item.id}, f'Peeking at top: "{item.value}"', delay=1500)
        yield self._step(rec, pointers={"top": item.id}, delay=0)
        return done(f'Peeking at top: "{item.value}"', item)

    def _reset_for_scenario(self, rec):
        yield self._step(rec, message="Clearing stack for scenario...", delay=0)
        self.items.clear()
        yield self._step(rec, message="Stack cleared.", delay=500)

    def _browser(self, rec: StepRecorder):
        yield from self._reset_for_scenario(rec)
        for site in ("google.com", "github.com", "stackoverflow.com", "react.dev"):
            result = yield from self._push(rec, site, "url")
            if not result:
                return result
            yield self._step(rec, delay=300)

        for _ in range(2):
            yield self._step(rec, message="User clicks Back button...", delay=1000)
            yield from self._pop(rec)
        return done(f'Current page: "{self.top.value}"', self.top)

    def _recursion(self, rec: StepRecorder, n: int = 5):
        yield from self._reset_for_scenario(rec)
        yield self._step(rec, message=f"Calculating factorial({n})...", delay=1000)
        for i in range(n, 0, -1):
            result = yield from self._push(rec, f"factorial({i})", "code")
            if not result:
                return result
            yield self._step(rec, delay=500)

        yield self._step(rec, message="Base case reached. Unwinding stack...", delay=1000)
        value = 1
        factor = 1
        while self.items:
            yield from self._pop(rec)
            value *= factor
            factor += 1
            yield self._step(rec, delay=300)

        yield self._step(rec, {}, message=f"Calculation complete: {value}", delay=2000)
        self._play("success")
        return done(f"Calculation complete: {value}", value)

    def _parentheses(self, rec: StepRecorder, expression: str = "(()())"):
        yield from self._reset_for_scenario(rec)
        yield self._step(rec, message=f"Checking balance for: {expression}", delay=1000)
        for char in expression:
            if char == "(":
                result = yield from self._push(rec, char, "paren")
                if not result:
                    return result
            elif char == ")":
                if not self.items:
                    yield self._step(rec, message="Error: Unbalanced closing parenthesis!", delay=2000)
                    self._play("error")
                    return failed(Outcome.UNDERFLOW, "Error: Unbalanced closing parenthesis!")
                yield self._step(rec, message="Found matching pair '()'", delay=0)
                yield from self._pop(rec)
            yield self._step(rec, delay=500)

        if self.items:
            yield self._step(rec, {i.id: OVERFLOW for i in self.items},
                             message="Error: Unclosed parentheses remaining!", delay=2000)
            self._play("error")
            return failed(Outcome.OVERFLOW, "Error: Unclosed parentheses remaining!")
        yield self._step(rec, message="Success: Parentheses are balanced!", delay=2000)
        self._play("success")
        return done("Success: Parentheses are balanced!", True)
