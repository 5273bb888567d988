"""
Indie vs AAA radar metrics.

Aggregates the catalog into six per-category totals and normalizes them so
the two radar charts share one 0-100 axis per metric.
"""

import pandas as pd

from config import DEFAULT_RADAR_CSV, RADAR_YEAR_MIN, RADAR_YEAR_MAX, RADAR_MAX_VALUE

# (key, label, tooltip name)
METRICS = [
    ("revenue", "$", "Revenue Generated"),
    ("rating", "♡", "Average Rating"),
    ("games", "#", "Number of Games"),
    ("positive", "💕", "Positive Ratings"),
    ("negative", "🖤", "Negative Ratings"),
    ("players", "👤", "Recent Player Count"),
]

INT_COLUMNS = ["total_reviews", "total_positive", "total_negative", "current_player_count"]


def load_games_table(path=DEFAULT_RADAR_CSV):
    """
    Read the radar CSV and coerce columns.

    Invalid numbers become 0, release_year is the first 4-digit group of
    release_date (None if absent), is_indie is "Indie" in genres.
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    return prepare_games_table(df)


def prepare_games_table(df):
    df = df.copy()
    for col in INT_COLUMNS:
        values = df[col] if col in df else pd.Series(0, index=df.index)
        df[col] = pd.to_numeric(values, errors="coerce").fillna(0).astype(int)

    score = df["review_score"] if "review_score" in df else pd.Series(0.0, index=df.index)
    df["review_score"] = pd.to_numeric(score, errors="coerce").fillna(0.0)

    price = df["price_initial (USD)"] if "price_initial (USD)" in df else pd.Series(0.0, index=df.index)
    df["price_initial"] = pd.to_numeric(price, errors="coerce").fillna(0.0)

    is_free = df["is_free"] if "is_free" in df else pd.Series("", index=df.index)
    df["is_free"] = is_free.astype(str).str.lower() == "true"

    dates = df["release_date"] if "release_date" in df else pd.Series("", index=df.index)
    years = dates.astype(str).str.extract(r"(\d{4})")[0]
    df["release_year"] = pd.to_numeric(years, errors="coerce").astype("Int64")

    genres = df["genres"] if "genres" in df else pd.Series("", index=df.index)
    df["is_indie"] = genres.astype(str).str.contains("Indie", regex=False)
    return df


def available_years(df):
    """Release years offered as filter buttons (within the configured window)."""
    years = df["release_year"].dropna()
    years = years[(years >= RADAR_YEAR_MIN) & (years <= RADAR_YEAR_MAX)]
    return sorted(int(y) for y in years.unique())


def calculate_revenue(games):
    """price × positive reviews over paid games (a rough sales proxy)."""
    paid = games[(~games["is_free"]) & (games["price_initial"] > 0)]
    return float((paid["price_initial"] * paid["total_positive"]).sum())


def calculate_average_rating(games):
    rated = games.loc[games["review_score"] > 0, "review_score"]
    if rated.empty:
        return 0.0
    return float(rated.mean())


def category_metrics(games):
    return {
        "revenue": calculate_revenue(games),
        "rating": calculate_average_rating(games),
        "games": int(len(games)),
        "positive": int(games["total_positive"].sum()),
        "negative": int(games["total_negative"].sum()),
        "players": int(games["current_player_count"].sum()),
    }


def aggregate_metrics(df, year="All"):
    """
    Metrics for indie and AAA games, optionally restricted to one release year.

    Returns {"indie": {...}, "aaa": {...}}.
    """
    if year != "All":
        df = df[df["release_year"].eq(int(year)).fillna(False).astype(bool)]
    return {
        "indie": category_metrics(df[df["is_indie"]]),
        "aaa": category_metrics(df[~df["is_indie"]]),
    }


def normalize_metrics(indie, aaa, max_value=RADAR_MAX_VALUE):
    """
    Scale each metric by the larger of the two categories onto [0, max_value].

    Returns (indie_normalized, aaa_normalized) as {key: value} dicts.
    """
    indie_n, aaa_n = {}, {}
    for key, _, _ in METRICS:
        top = max(indie[key], aaa[key])
        indie_n[key] = indie[key] / top * max_value if top > 0 else 0.0
        aaa_n[key] = aaa[key] / top * max_value if top > 0 else 0.0
    return indie_n, aaa_n
