"""
Workflow configuration: which events a chain handles, which stages it runs and
how contributors are classified.

The YAML file lives at config/workflow.yaml by default; CONTRIB_SCORE_CONFIG
or an explicit path overrides it. A missing file falls back to the built-in
defaults below.
"""
import copy
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import yaml

from common.logger import get_logger
from core.chain import StageChain
from core.errors import ConfigurationError
from core.stage import Stage
from normalize.models import Event
from scoring.aggregator import ScoreAggregator
from scoring.scorers import create_scorer
from stages.content_filter import ContentFilter
from stages.policy import ContributorPolicy
from stages.preprocessors import BotCommentPreprocessor, SlashCommandPreprocessor
from stages.scoring_pipeline import ScoringPipeline

logger = get_logger("workflow")

WORKFLOW_FILENAME = 'workflow.yaml'
CONFIG_ENV = 'CONTRIB_SCORE_CONFIG'

DEFAULT_WORKFLOW: Dict[str, Any] = {
    'name': 'comment-quality',
    'on': {
        'github': {
            'issue_comment': ['created', 'edited'],
            'pull_request_review_comment': ['created', 'edited'],
            'pull_request_review': ['submitted'],
        },
    },
    'policy': {},
    'grouping': {'enabled': True},
    'stages': [
        {'uses': 'bot-comment-preprocessor'},
        {'uses': 'slash-command-preprocessor'},
        {'uses': 'content-filter', 'with': {'exclude_bots': True, 'min_length': 10}},
        {'uses': 'scoring-pipeline', 'id': 'quality', 'with': {
            'strategy': 'weighted-average',
            'scorers': [
                {'uses': 'readability', 'weight': 0.6},
                {'uses': 'technical', 'weight': 0.4},
            ],
        }},
    ],
    'presets': {},
}

POLICY_KEYS = ('bot_suffixes', 'bot_names', 'exempt_bots', 'excluded_commands',
               'ignore_leading_whitespace', 'check_account_type')


def default_config_path() -> str:
    return os.path.join(os.path.dirname(os.path.dirname(__file__)), 'config', WORKFLOW_FILENAME)


class SimpleEventMatcher:
    """Matches ``com.<platform>.<event>.<action>`` event types."""

    def __init__(self, platform: str, event_type: str):
        self.platform = platform
        self.event_type = event_type

    def matches(self, event: Event) -> bool:
        parts = event.type.split('.')
        if len(parts) < 3:
            return False
        return parts[1] == self.platform and '.'.join(parts[2:]) == self.event_type

    def __repr__(self) -> str:
        return f"SimpleEventMatcher({self.platform!r}, {self.event_type!r})"


@dataclass
class StageConfig:
    uses: str
    id: Optional[str] = None
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class WorkflowConfig:
    name: str
    on: Dict[str, Dict[str, List[str]]]
    stages: List[StageConfig]
    policy: Dict[str, Any] = field(default_factory=dict)
    grouping_enabled: bool = True
    presets: Dict[str, Dict[str, float]] = field(default_factory=dict)
    description: str = ''

    @classmethod
    def from_mapping(cls, doc: Dict[str, Any]) -> "WorkflowConfig":
        if not isinstance(doc, dict):
            raise ConfigurationError('workflow', 'top-level document must be a mapping')
        # YAML 1.1 reads a bare `on` key as boolean True
        triggers = doc.get('on', doc.get(True)) or {}
        stages = []
        for i, entry in enumerate(doc.get('stages') or []):
            if not isinstance(entry, dict):
                raise ConfigurationError(f'stages[{i}]', 'must be a mapping')
            stages.append(StageConfig(uses=entry.get('uses'), id=entry.get('id'),
                                      options=dict(entry.get('with') or {})))
        grouping = doc.get('grouping') or {}
        config = cls(
            name=doc.get('name'),
            on=triggers,
            stages=stages,
            policy=dict(doc.get('policy') or {}),
            grouping_enabled=bool(grouping.get('enabled', True)),
            presets=dict(doc.get('presets') or {}),
            description=doc.get('description') or '',
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Raise ConfigurationError for the first structural problem found."""
        if not self.name:
            raise ConfigurationError('name')
        if not isinstance(self.on, dict) or not self.on:
            raise ConfigurationError('on', 'at least one platform trigger is required')
        for platform, events in self.on.items():
            if not isinstance(events, dict):
                raise ConfigurationError(f'on.{platform}', 'must map event names to action lists')
            for event_name, actions in events.items():
                if not isinstance(actions, list):
                    raise ConfigurationError(f'on.{platform}.{event_name}', 'actions must be a list')
        if not self.stages:
            raise ConfigurationError('stages', 'at least one stage is required')
        for i, stage in enumerate(self.stages):
            if not stage.uses:
                raise ConfigurationError(f'stages[{i}].uses')
            if stage.uses not in STAGE_FACTORIES:
                raise ConfigurationError(f'stages[{i}].uses', f"unknown stage {stage.uses!r}")
        unknown = set(self.policy) - set(POLICY_KEYS)
        if unknown:
            raise ConfigurationError('policy', f"unknown keys: {sorted(unknown)}")
        for name, weights in self.presets.items():
            if not isinstance(weights, dict):
                raise ConfigurationError(f'presets.{name}', 'must map scorer ids to weights')

    def event_matchers(self) -> List[SimpleEventMatcher]:
        matchers = []
        for platform, events in self.on.items():
            for event_name, actions in events.items():
                for action in actions:
                    matchers.append(SimpleEventMatcher(platform, f"{event_name}.{action}"))
        return matchers

    def build_policy(self) -> ContributorPolicy:
        return ContributorPolicy(**self.policy)

    def build_chain(self, chain_id: Optional[str] = None,
                    policy: Optional[ContributorPolicy] = None) -> StageChain:
        """Instantiate every configured stage, in order, into a new chain."""
        policy = policy or self.build_policy()
        chain = StageChain(chain_id or self.name, matchers=self.event_matchers())
        for stage_config in self.stages:
            factory = STAGE_FACTORIES[stage_config.uses]
            chain.add_stage(factory(stage_config.options, policy))
        logger.debug("built chain %r with %d stage(s)", chain.chain_id, len(chain))
        return chain

    def list_presets(self) -> List[str]:
        return list(self.presets.keys())

    def apply_preset(self, name: str) -> "WorkflowConfig":
        """Return a copy with the preset's scorer weights merged over the configured ones."""
        if name not in self.presets:
            raise ConfigurationError(f'presets.{name}', 'preset not found')
        overrides = self.presets[name] or {}
        config = copy.deepcopy(self)
        for stage in config.stages:
            if stage.uses != 'scoring-pipeline':
                continue
            for scorer in stage.options.get('scorers') or []:
                sid = scorer.get('uses')
                if sid in overrides:
                    scorer['weight'] = float(overrides[sid])
        return config


def _content_filter(options: Dict[str, Any], policy: ContributorPolicy) -> Stage:
    return ContentFilter(policy=policy, **options)


def _bot_preprocessor(options: Dict[str, Any], policy: ContributorPolicy) -> Stage:
    return BotCommentPreprocessor(policy=policy)


def _slash_preprocessor(options: Dict[str, Any], policy: ContributorPolicy) -> Stage:
    return SlashCommandPreprocessor(policy=policy)


def _scoring_pipeline(options: Dict[str, Any], policy: ContributorPolicy) -> Stage:
    scorers = []
    for i, entry in enumerate(options.get('scorers') or []):
        if not isinstance(entry, dict) or not entry.get('uses'):
            raise ConfigurationError(f'scoring-pipeline.scorers[{i}].uses')
        scorer = create_scorer(entry['uses'], **dict(entry.get('with') or {}))
        scorers.append((scorer, entry.get('weight', 1.0)))
    aggregator = ScoreAggregator(
        scorers,
        strategy=options.get('strategy', 'weighted-average'),
        weight=options.get('weight', 1.0),
    )
    return ScoringPipeline(aggregator)


STAGE_FACTORIES: Dict[str, Callable[[Dict[str, Any], ContributorPolicy], Stage]] = {
    'content-filter': _content_filter,
    'bot-comment-preprocessor': _bot_preprocessor,
    'slash-command-preprocessor': _slash_preprocessor,
    'scoring-pipeline': _scoring_pipeline,
}


def load_workflow(path: Optional[str] = None) -> WorkflowConfig:
    """
    Load a workflow from YAML.

    Resolution order: explicit *path*, CONTRIB_SCORE_CONFIG, config/workflow.yaml.
    An explicit path that does not exist is an error; a missing default file
    yields the built-in workflow.
    """
    explicit = path or os.getenv(CONFIG_ENV)
    path = explicit or default_config_path()

    if not os.path.exists(path):
        if explicit:
            raise ConfigurationError('config', f"workflow file not found at: {path}")
        logger.debug("no workflow file at %s, using built-in defaults", path)
        return WorkflowConfig.from_mapping(copy.deepcopy(DEFAULT_WORKFLOW))

    try:
        with open(path, 'r', encoding='utf-8') as f:
            doc = yaml.safe_load(f) or {}
    except yaml.YAMLError as ex:
        raise ConfigurationError('config', f"failed to parse {path}: {ex}")

    logger.debug("loaded workflow from %s", path)
    return WorkflowConfig.from_mapping(doc)
