"""
pokerscore.engine.catalog — Achievement Catalog
================================================

Static table of every badge ("haut fait") the club can award.

* **Permanent** badges are earned once and kept forever.  Each carries a
  :class:`TriggerType` and its ``trigger_config``, evaluated by the
  handler registry in :mod:`pokerscore.engine.achievements`.
* **Seasonal** badges are titles held by whoever leads a per-season
  :class:`~pokerscore.engine.stats.SeasonStat`; they change hands as the
  season goes on.

News phrases are in French, the language of the club.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass, field

from pokerscore.engine.stats import SeasonStat

__all__ = [
    "ACHIEVEMENTS",
    "ACHIEVEMENTS_BY_ID",
    "Achievement",
    "AchievementType",
    "TriggerType",
    "get_achievement",
    "permanent_achievements",
    "seasonal_achievements",
]


class AchievementType(enum.StrEnum):
    PERMANENT = "permanent"
    SEASONAL = "seasonal"


class TriggerType(enum.StrEnum):
    """What condition unlocks a permanent badge."""
    GAMES_PLAYED = "games_played"
    COUNTER_THRESHOLD = "counter_threshold"
    CHIP_STACK = "chip_stack"
    ROUND_STACK = "round_stack"
    REPEATED_DIGITS = "repeated_digits"
    LAST_STANDING = "last_standing"
    NARROW_SURVIVAL = "narrow_survival"
    SEASON_WINS = "season_wins"
    CONSECUTIVE_SEASON_WINS = "consecutive_season_wins"


@dataclass(frozen=True, slots=True)
class Achievement:
    """One catalog entry.  Never mutated at runtime."""

    id: str
    name: str
    description: str
    emoji: str
    type: AchievementType
    news_phrase: Callable[[str], str]
    loss_phrase: Callable[[str, str], str] | None = None
    trigger: TriggerType | None = None
    trigger_config: dict = field(default_factory=dict)
    stat: SeasonStat | None = None
    supersedes: str | None = None  # lower tier dropped when both unlock together


_P = AchievementType.PERMANENT
_S = AchievementType.SEASONAL


ACHIEVEMENTS: tuple[Achievement, ...] = (
    # ------------------------------------------------------------------
    # Participation
    # ------------------------------------------------------------------
    Achievement(
        id="veteran",
        name="Le Vétéran",
        description="Participer à 10 parties (toutes saisons confondues).",
        emoji="🎖️",
        type=_P,
        news_phrase=lambda p: f"🎖️ {p} est devenu un Vétéran des tables de poker en participant à 10 parties !",
        trigger=TriggerType.GAMES_PLAYED,
        trigger_config={"value": 10},
    ),
    Achievement(
        id="regular",
        name="L'Habitué",
        description="Participer à 25 parties (toutes saisons confondues).",
        emoji="🪑",
        type=_P,
        news_phrase=lambda p: f"🪑 {p} a désormais sa chaise attitrée : 25 parties au compteur !",
        trigger=TriggerType.GAMES_PLAYED,
        trigger_config={"value": 25},
    ),
    Achievement(
        id="pillar",
        name="Le Pilier du Club",
        description="Participer à 50 parties (toutes saisons confondues).",
        emoji="🏛️",
        type=_P,
        news_phrase=lambda p: f"🏛️ 50 parties ! {p} est officiellement un Pilier du Club.",
        trigger=TriggerType.GAMES_PLAYED,
        trigger_config={"value": 50},
    ),
    # ------------------------------------------------------------------
    # Single-game feats
    # ------------------------------------------------------------------
    Achievement(
        id="big_stack",
        name="Le Gros Tapis",
        description="Terminer une partie avec au moins 50 000 jetons.",
        emoji="💰",
        type=_P,
        news_phrase=lambda p: f"💰 {p} a fini la soirée assis sur une montagne de jetons !",
        trigger=TriggerType.CHIP_STACK,
        trigger_config={"value": 50_000},
    ),
    Achievement(
        id="round_stack",
        name="Le Compte Rond",
        description="Terminer une partie avec un tapis multiple de 10 000 jetons.",
        emoji="🎯",
        type=_P,
        news_phrase=lambda p: f"🎯 {p} a terminé avec un compte parfaitement rond. Maniaque ?",
        trigger=TriggerType.ROUND_STACK,
        trigger_config={"multiple": 10_000},
    ),
    Achievement(
        id="lucky_digits",
        name="Le Chiffre Porte-Bonheur",
        description="Terminer une partie avec un tapis composé d'un seul chiffre répété (ex. 7777).",
        emoji="🍀",
        type=_P,
        news_phrase=lambda p: f"🍀 {p} a terminé avec un tapis aux chiffres jumeaux. La chance sourit aux audacieux !",
        trigger=TriggerType.REPEATED_DIGITS,
        trigger_config={"min_digits": 3},
    ),
    Achievement(
        id="last_standing",
        name="Le Dernier Debout",
        description="Remporter une partie d'au moins 5 joueurs en étant le seul à garder des jetons.",
        emoji="🗡️",
        type=_P,
        news_phrase=lambda p: f"🗡️ {p} a éliminé toute la table et reste le Dernier Debout !",
        trigger=TriggerType.LAST_STANDING,
        trigger_config={"min_players": 5},
    ),
    Achievement(
        id="miracle_survivor",
        name="Le Miraculé",
        description="Survivre avec 1 à 3 000 jetons dans une partie d'au moins 6 joueurs.",
        emoji="🩹",
        type=_P,
        news_phrase=lambda p: f"🩹 {p} a survécu avec trois fois rien. Un vrai Miraculé !",
        trigger=TriggerType.NARROW_SURVIVAL,
        trigger_config={"min_players": 6, "min_chips": 1, "max_chips": 3_000},
    ),
    # ------------------------------------------------------------------
    # Lifetime counters
    # ------------------------------------------------------------------
    Achievement(
        id="runner_up",
        name="Le Poulidor",
        description="Finir 8 fois deuxième.",
        emoji="🚴",
        type=_P,
        news_phrase=lambda p: f"🚴 {p} collectionne les deuxièmes places : 8 au total. Un vrai Poulidor !",
        trigger=TriggerType.COUNTER_THRESHOLD,
        trigger_config={"field": "second_place_count", "value": 8},
    ),
    Achievement(
        id="eternal_dolphin",
        name="L'Éternel Dauphin",
        description="Finir 10 fois deuxième.",
        emoji="🐬",
        type=_P,
        news_phrase=lambda p: f"🐬 10 deuxièmes places pour {p}. Si près, et pourtant...",
        trigger=TriggerType.COUNTER_THRESHOLD,
        trigger_config={"field": "second_place_count", "value": 10},
    ),
    Achievement(
        id="gambler",
        name="Le Flambeur",
        description="Terminer 10 parties sans aucun jeton.",
        emoji="🎲",
        type=_P,
        news_phrase=lambda p: f"🎲 {p} a tout flambé pour la 10e fois. Respect.",
        trigger=TriggerType.COUNTER_THRESHOLD,
        trigger_config={"field": "zero_chip_count", "value": 10},
    ),
    Achievement(
        id="first_blood",
        name="Premier Sang",
        description="Être le premier éliminé 5 fois.",
        emoji="🩸",
        type=_P,
        news_phrase=lambda p: f"🩸 {p} a ouvert le bal des éliminations pour la 5e fois...",
        trigger=TriggerType.COUNTER_THRESHOLD,
        trigger_config={"field": "first_blood_count", "value": 5},
    ),
    Achievement(
        id="invincible",
        name="L'Invincible",
        description="Enchaîner 8 parties sans finir dernier.",
        emoji="🛡️",
        type=_P,
        news_phrase=lambda p: f"🛡️ 8 parties sans finir dernier : {p} est Invincible !",
        trigger=TriggerType.COUNTER_THRESHOLD,
        trigger_config={"field": "invincible_streak", "value": 8},
    ),
    Achievement(
        id="ventre_mou",
        name="Le Ventre Mou",
        description="Finir 5 fois pile au milieu du classement.",
        emoji="😐",
        type=_P,
        news_phrase=lambda p: f"😐 {p} a fini pile au milieu pour la 5e fois. Le roi du Ventre Mou.",
        trigger=TriggerType.COUNTER_THRESHOLD,
        trigger_config={"field": "ventre_mou_count", "value": 5},
    ),
    Achievement(
        id="chip_collector",
        name="Le Collectionneur",
        description="Amasser 500 000 jetons au total.",
        emoji="🪙",
        type=_P,
        news_phrase=lambda p: f"🪙 {p} a amassé un demi-million de jetons en carrière !",
        trigger=TriggerType.COUNTER_THRESHOLD,
        trigger_config={"field": "total_chips_amassed", "value": 500_000},
    ),
    Achievement(
        id="chip_millionaire",
        name="Le Millionnaire",
        description="Amasser 1 000 000 de jetons au total.",
        emoji="💎",
        type=_P,
        news_phrase=lambda p: f"💎 {p} franchit le million de jetons amassés. Un Millionnaire !",
        trigger=TriggerType.COUNTER_THRESHOLD,
        trigger_config={"field": "total_chips_amassed", "value": 1_000_000},
        supersedes="chip_collector",
    ),
    # ------------------------------------------------------------------
    # Season wins (evaluated at season rollover only)
    # ------------------------------------------------------------------
    Achievement(
        id="champion",
        name="Le Champion",
        description="Remporter une saison.",
        emoji="🏆",
        type=_P,
        news_phrase=lambda p: f"🏆 {p} remporte la saison et devient Champion !",
        trigger=TriggerType.SEASON_WINS,
        trigger_config={"value": 1},
    ),
    Achievement(
        id="double",
        name="Le Doublé",
        description="Remporter 2 saisons.",
        emoji="✌️",
        type=_P,
        news_phrase=lambda p: f"✌️ Deuxième titre de saison pour {p} : le Doublé !",
        trigger=TriggerType.SEASON_WINS,
        trigger_config={"value": 2},
    ),
    Achievement(
        id="dynasty",
        name="La Dynastie",
        description="Remporter 3 saisons.",
        emoji="🏰",
        type=_P,
        news_phrase=lambda p: f"🏰 Trois saisons remportées : {p} fonde une Dynastie !",
        trigger=TriggerType.SEASON_WINS,
        trigger_config={"value": 3},
    ),
    Achievement(
        id="emperor",
        name="L'Empereur",
        description="Remporter 4 saisons.",
        emoji="🦅",
        type=_P,
        news_phrase=lambda p: f"🦅 Quatre couronnes : {p} règne en Empereur sur le club !",
        trigger=TriggerType.SEASON_WINS,
        trigger_config={"value": 4},
    ),
    Achievement(
        id="poker_god",
        name="Le Dieu du Poker",
        description="Remporter 5 saisons.",
        emoji="⚡",
        type=_P,
        news_phrase=lambda p: f"⚡ Cinq saisons ! {p} entre au panthéon : le Dieu du Poker.",
        trigger=TriggerType.SEASON_WINS,
        trigger_config={"value": 5},
    ),
    Achievement(
        id="back_to_back",
        name="Le Back-to-Back",
        description="Remporter deux saisons consécutives.",
        emoji="🔁",
        type=_P,
        news_phrase=lambda p: f"🔁 {p} conserve son titre : deux saisons d'affilée !",
        trigger=TriggerType.CONSECUTIVE_SEASON_WINS,
        trigger_config={"value": 2},
    ),
    # ------------------------------------------------------------------
    # Seasonal titles
    # ------------------------------------------------------------------
    Achievement(
        id="conqueror",
        name="Le Conquérant",
        description="Être le joueur avec le plus de victoires (1ère place) durant la saison en cours.",
        emoji="👑",
        type=_S,
        news_phrase=lambda p: f"👑 {p} s'empare du titre de Conquérant de la saison avec le plus de victoires !",
        loss_phrase=lambda p, n: f"👑 {p} a perdu son titre de Conquérant au profit de {n} !",
        stat=SeasonStat.WINS,
    ),
    Achievement(
        id="red_lantern",
        name="La Lanterne Rouge",
        description="Être le joueur avec le plus de dernières places durant la saison en cours.",
        emoji="😥",
        type=_S,
        news_phrase=lambda p: f"😥 {p} est la nouvelle Lanterne Rouge de la saison...",
        loss_phrase=lambda p, n: f"😥 {p} a passé le flambeau de la Lanterne Rouge à {n} !",
        stat=SeasonStat.LAST_PLACES,
    ),
    Achievement(
        id="eternal_second",
        name="L'Éternel Second",
        description="Être le joueur avec le plus de deuxièmes places durant la saison en cours.",
        emoji="🥈",
        type=_S,
        news_phrase=lambda p: f"🥈 {p} devient l'Éternel Second de la saison.",
        loss_phrase=lambda p, n: f"🥈 {p} cède le titre d'Éternel Second à {n} !",
        stat=SeasonStat.SECOND_PLACES,
    ),
    Achievement(
        id="kamikaze",
        name="Le Kamikaze",
        description="Être le joueur qui finit le plus souvent sans jetons durant la saison en cours.",
        emoji="💥",
        type=_S,
        news_phrase=lambda p: f"💥 {p} est le Kamikaze de la saison : tapis, toujours tapis !",
        loss_phrase=lambda p, n: f"💥 {p} n'est plus le Kamikaze de la saison, {n} prend le relais !",
        stat=SeasonStat.ZERO_CHIPS,
    ),
    Achievement(
        id="assidu",
        name="L'Assidu",
        description="Être le joueur ayant participé au plus de parties durant la saison en cours.",
        emoji="📅",
        type=_S,
        news_phrase=lambda p: f"📅 {p} est l'Assidu de la saison : jamais une partie de manquée !",
        loss_phrase=lambda p, n: f"📅 {p} perd le titre d'Assidu au profit de {n}.",
        stat=SeasonStat.APPEARANCES,
    ),
    Achievement(
        id="metronome",
        name="Le Métronome",
        description="Avoir la plus longue série de présences consécutives en cours durant la saison.",
        emoji="⏱️",
        type=_S,
        news_phrase=lambda p: f"⏱️ {p} est le Métronome de la saison, présent partie après partie.",
        loss_phrase=lambda p, n: f"⏱️ {p} a manqué le rythme : {n} devient le Métronome !",
        stat=SeasonStat.APPEARANCE_STREAK,
    ),
)

ACHIEVEMENTS_BY_ID: dict[str, Achievement] = {a.id: a for a in ACHIEVEMENTS}


def get_achievement(achievement_id: str) -> Achievement | None:
    return ACHIEVEMENTS_BY_ID.get(achievement_id)


def permanent_achievements(
    catalog: tuple[Achievement, ...] = ACHIEVEMENTS,
) -> list[Achievement]:
    return [a for a in catalog if a.type is AchievementType.PERMANENT]


def seasonal_achievements(
    catalog: tuple[Achievement, ...] = ACHIEVEMENTS,
) -> list[Achievement]:
    return [a for a in catalog if a.type is AchievementType.SEASONAL]
