from ingest_trends.models import TrendSourceSeed

DEFAULT_RSS_SOURCES = [
    # Top
    TrendSourceSeed(
        source_key="google_news_top_jp",
        name="Google News Top (JP)",
        url="https://news.google.com/rss?hl=ja&gl=JP&ceid=JP:ja",
        weight=1.15,
        category="news",
        theme="top",
    ),
    TrendSourceSeed(
        source_key="google_news_top_us",
        name="Google News Top (US)",
        url="https://news.google.com/rss?hl=en-US&gl=US&ceid=US:en",
        weight=1.1,
        category="news",
        theme="top",
    ),
    TrendSourceSeed(
        source_key="nhk_news",
        name="NHK News",
        url="https://www3.nhk.or.jp/rss/news/cat0.xml",
        weight=1.05,
        category="news",
        theme="top",
    ),
    # Technology
    TrendSourceSeed(
        source_key="google_news_technology",
        name="Google News Technology",
        url="https://news.google.com/rss/search?q=technology&hl=en-US&gl=US&ceid=US:en",
        weight=1.3,
        category="tech",
        theme="technology",
    ),
    TrendSourceSeed(
        source_key="techcrunch",
        name="TechCrunch",
        url="https://techcrunch.com/feed/",
        weight=1.22,
        category="tech",
        theme="technology",
    ),
    TrendSourceSeed(
        source_key="the_verge",
        name="The Verge",
        url="https://www.theverge.com/rss/index.xml",
        weight=1.18,
        category="tech",
        theme="technology",
    ),
    TrendSourceSeed(
        source_key="gigazine",
        name="GIGAZINE",
        url="https://gigazine.net/news/rss_2.0/",
        weight=1.2,
        category="tech",
        theme="technology",
    ),
    # AI
    TrendSourceSeed(
        source_key="google_news_ai",
        name="Google News AI",
        url="https://news.google.com/rss/search?q=artificial+intelligence&hl=en-US&gl=US&ceid=US:en",
        weight=1.35,
        category="ai",
        theme="ai",
    ),
    TrendSourceSeed(
        source_key="google_news_machine_learning",
        name="Google News Machine Learning",
        url="https://news.google.com/rss/search?q=machine+learning&hl=en-US&gl=US&ceid=US:en",
        weight=1.28,
        category="ai",
        theme="ai",
    ),
    # Startup
    TrendSourceSeed(
        source_key="google_news_startup",
        name="Google News Startup",
        url="https://news.google.com/rss/search?q=startup&hl=en-US&gl=US&ceid=US:en",
        weight=1.14,
        category="startup",
        theme="startup",
    ),
    TrendSourceSeed(
        source_key="hacker_news_frontpage",
        name="Hacker News Frontpage",
        url="https://hnrss.org/frontpage",
        weight=1.16,
        category="startup",
        theme="startup",
    ),
    # Entertainment
    TrendSourceSeed(
        source_key="variety",
        name="Variety",
        url="https://variety.com/feed/",
        weight=1.12,
        category="entertainment",
        theme="entertainment",
    ),
    TrendSourceSeed(
        source_key="ign_all",
        name="IGN",
        url="https://feeds.feedburner.com/ign/all",
        weight=1.12,
        category="game",
        theme="entertainment",
    ),
    TrendSourceSeed(
        source_key="anime_news_network",
        name="Anime News Network",
        url="https://www.animenewsnetwork.com/all/rss.xml",
        weight=1.1,
        category="anime",
        theme="entertainment",
    ),
]
