"""
Data loading for the space chart.

Joins the Steam catalog with the current player counts and turns each
surviving game into a GameRecord. Cluster = first listed genre. Records
whose genre has no anchor are left for the registry to drop.
"""

import re

import pandas as pd

from config import MIN_PLAYERS, DEFAULT_GAMES_CSV, DEFAULT_PLAYERS_CSV
from nodes import GameRecord


def parse_genres(text):
    """
    "['Action', 'Indie']" → ["Action", "Indie"]

    Brackets and quotes are stripped, entries trimmed, empties removed.
    """
    if not isinstance(text, str) or not text:
        return []
    cleaned = re.sub(r"[\[\]']", "", text)
    return [g.strip() for g in cleaned.split(",") if g.strip()]


def merge_player_counts(games, players, min_players=MIN_PLAYERS):
    """
    Inner join on steam_appid; keeps games with at least min_players.

    Returns a DataFrame with steam_appid, game_name, genres (list),
    player_count, positive_percentual.
    """
    players = players[["steam_appid", "current_player_count"]].copy()
    players["current_player_count"] = pd.to_numeric(players["current_player_count"], errors="coerce")
    players = players.dropna(subset=["current_player_count"])
    players["steam_appid"] = players["steam_appid"].astype(str)

    games = games.copy()
    games["steam_appid"] = games["steam_appid"].astype(str)

    merged = games.merge(players, on="steam_appid", how="inner")
    out = pd.DataFrame({
        "steam_appid": merged["steam_appid"],
        "game_name": merged["name"].astype(str),
        "genres": merged["genres"].map(parse_genres),
        "player_count": merged["current_player_count"].astype(float),
        "positive_percentual": pd.to_numeric(merged["positive_percentual"], errors="coerce"),
    })
    return out[out["player_count"] >= min_players].reset_index(drop=True)


def to_records(table):
    """One GameRecord per row that lists at least one genre, keyed by appid."""
    records = []
    for row in table.itertuples(index=False):
        if not row.genres:
            continue
        records.append(GameRecord(
            id=str(row.steam_appid),
            cluster=row.genres[0],
            weight=row.player_count,
            quality=row.positive_percentual,
            tags=tuple(row.genres),
            name=row.game_name,
        ))
    return records


def load_space_records(games_csv=DEFAULT_GAMES_CSV, players_csv=DEFAULT_PLAYERS_CSV,
                       min_players=MIN_PLAYERS):
    """Read both CSVs and return the records fed to Simulation.load()."""
    games = pd.read_csv(games_csv)
    players = pd.read_csv(players_csv)
    table = merge_player_counts(games, players, min_players)
    records = to_records(table)
    print(f"[Loader] {len(records)} games with ≥{min_players} players "
          f"(catalog {len(games)}, player counts {len(players)})")
    return records
