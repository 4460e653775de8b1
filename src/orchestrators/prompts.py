# src/orchestrators/prompts.py - v1
"""Prompt templates for every provider-facing operation."""

from __future__ import annotations

from typing import Any

# === TEXT GENERATION ===

DESCRIPTION_DEFAULTS: dict[str, str] = {
    "origin": "West Africa",
    "harvest_date": "Recent",
    "features": "High quality, fresh produce",
}
DEFAULT_TARGET_AUDIENCE = "Health-conscious consumers and restaurants"

COPYWRITER_SYSTEM = (
    "You are an expert marketing copywriter specializing in agricultural products "
    "and African markets. Create compelling, culturally appropriate marketing content."
)


def description_prompt(payload: dict[str, Any]) -> str:
    organic = "Yes" if payload.get("is_organic") else "No"
    return f"""Create a compelling, professional product description for an agricultural marketplace in West Africa.

Product Details:
- Name: {payload["name"]}
- Category: {payload["category"]}
- Origin: {payload.get("origin") or DESCRIPTION_DEFAULTS["origin"]}
- Organic: {organic}
- Harvest Date: {payload.get("harvest_date") or DESCRIPTION_DEFAULTS["harvest_date"]}
- Special Features: {payload.get("features") or DESCRIPTION_DEFAULTS["features"]}

Requirements:
1. Write in clear, simple English suitable for international buyers
2. Highlight freshness, quality, and origin
3. Include nutritional benefits if applicable
4. Mention any certifications or special handling
5. Keep it between 100-200 words
6. Make it appealing for both local and export markets
7. Include storage and handling recommendations

You are an expert agricultural marketing specialist creating product descriptions for an African agricultural marketplace. Focus on quality, freshness, and market appeal.

Write a description that would convince buyers to purchase this product:"""


def marketing_prompt(payload: dict[str, Any], copy_type: str) -> str:
    name = payload["name"]
    audience = payload.get("target_audience") or DEFAULT_TARGET_AUDIENCE

    if copy_type == "social_media":
        category = payload.get("category") or "agricultural product"
        benefits = payload.get("benefits") or "Fresh, high quality produce"
        return f"""Create engaging social media posts for {name}, a {category} from West Africa.
Benefits: {benefits}
Target Audience: {audience}

Create 3 different posts:
1. Instagram caption with relevant hashtags
2. Facebook post for business page
3. Twitter/X post

Make them engaging, include call-to-action, and highlight quality and origin."""

    if copy_type == "email_campaign":
        return f"""Create an email marketing campaign for {name}. Include:
1. Subject line
2. Email body (200-300 words)
3. Call-to-action

Focus on quality, freshness, and benefits for buyers."""

    if copy_type == "product_listing":
        return f"""Create an optimized product listing title and bullet points for {name}:
1. SEO-optimized title (under 60 characters)
2. 5 key bullet points highlighting benefits
3. Tags for searchability

Optimize for agricultural marketplace search."""

    return f"Create marketing copy for {name}, focusing on its benefits and appeal to {audience}."


# === IMAGES ===


def stock_query(product_name: str, category: str | None) -> str:
    parts = [product_name, category or "", "agriculture food fresh"]
    return " ".join(p for p in parts if p)


def image_generation_prompt(payload: dict[str, Any]) -> str:
    style = payload.get("style") or "professional"
    background = payload.get("background") or "clean white"
    category = payload.get("category") or "agricultural product"
    return f"""Professional food photography of {payload["product_name"]}, {category} from West Africa.
Style: {style} product photography
Background: {background}
Lighting: Natural, bright lighting that highlights freshness and quality
Composition: Well-arranged, appetizing presentation suitable for e-commerce
Quality: High resolution, sharp focus, vibrant colors
Setting: Clean, modern, commercial food photography setup

Create an image that would be perfect for an agricultural marketplace listing, emphasizing freshness, quality, and appeal to potential buyers."""


# === CROP IMAGE ANALYSIS ===

AGRONOMIST_PREAMBLE = """You are an expert agricultural scientist and crop consultant with extensive knowledge of West African farming conditions, climate, soil types, and agricultural practices. You have 20+ years of experience in crop diagnostics, plant pathology, and agricultural extension services across sub-Saharan Africa.

Your analysis should be:
- Practical and actionable for smallholder farmers
- Culturally and climatically appropriate for West Africa
- Cost-effective and accessible
- Based on sustainable farming practices
- Considerate of local resource availability
"""

ANALYSIS_PROMPTS: dict[str, str] = {
    "health": """Analyze this crop image for plant health. Identify:
1. Overall plant health status (healthy, stressed, diseased)
2. Any visible diseases or pest damage
3. Nutritional deficiencies (if apparent)
4. Growth stage assessment
5. Recommendations for improvement
Provide specific, actionable advice for farmers in West Africa.""",
    "quality": """Assess the quality of this agricultural product. Evaluate:
1. Ripeness level
2. Size and uniformity
3. Color and appearance
4. Any visible defects or damage
5. Market grade estimation (A, B, C grade)
6. Storage and handling recommendations
Provide quality score (1-10) and market advice for West African farmers.""",
    "pest": """Analyze this image for pest and disease identification:
1. Identify any pests or pest damage
2. Recognize disease symptoms
3. Assess severity level (low, medium, high)
4. Recommend treatment options suitable for West Africa
5. Prevention strategies
Focus on common West African agricultural pests and diseases.""",
    "disease": """Analyze this crop image for disease symptoms:
1. Visible disease symptoms and affected plant parts
2. Most likely disease and its cause
3. Severity level (low, medium, high)
4. Treatment options suitable for West Africa
5. Prevention strategies for the next season""",
    "maturity": """Assess the maturity of this crop:
1. Current growth stage
2. Estimated time to harvest
3. Ripeness and quality indicators
4. Harvesting and post-harvest recommendations""",
    "market_research": """Analyze this agricultural product for market potential using current web data:
1. Current market demand and pricing trends
2. Seasonal factors affecting price
3. Export potential and international markets
4. Quality standards for premium markets
5. Marketing and positioning recommendations
Provide actionable insights for West African farmers looking to maximize profits.""",
}
GENERAL_ANALYSIS_PROMPT = (
    "Analyze this agricultural image and provide comprehensive insights about crop "
    "condition, quality, and any recommendations for the farmer in West Africa."
)
CROP_IDENTIFICATION_PROMPT = (
    "Identify the main agricultural crop or product in this image. "
    "Provide just the name of the crop/product."
)
MARKET_RESEARCH_FALLBACK_ADVICE = (
    "Check local agricultural extension services for current market prices and trends."
)
CROP_MARKET_SYSTEM = (
    "You are an agricultural market analyst specializing in West African commodity "
    "markets. Provide accurate, current market data with specific prices when possible."
)


def analysis_prompt(analysis_type: str) -> str:
    body = ANALYSIS_PROMPTS.get(analysis_type, GENERAL_ANALYSIS_PROMPT)
    return f"{AGRONOMIST_PREAMBLE}\n{body}"


def crop_market_prompt(crop_name: str) -> str:
    return f"""Research current market information for {crop_name} in West Africa:
1. Current wholesale and retail prices in major West African markets
2. Seasonal price trends and peak demand periods
3. Export opportunities and international demand
4. Quality standards and certifications that command premium prices
5. Storage and post-harvest handling best practices
6. Main buyers and distribution channels
7. Government policies or subsidies affecting this crop
8. Recent market trends and price forecasts

Focus on actionable insights for farmers in countries like Nigeria, Ghana, Senegal, and Côte d'Ivoire."""


# === LOCATION INTELLIGENCE ===

ANALYST_SYSTEM = """You are an expert agricultural market analyst and meteorological specialist with comprehensive knowledge of African agricultural markets, weather patterns, and farming systems.

Your expertise includes:
- Real-time commodity pricing and market dynamics
- Local and regional agricultural value chains
- Weather forecasting and agricultural implications
- Seasonal market trends and harvest calendars
- Export market opportunities and trade requirements
- Government policies affecting agriculture
- Currency and economic factors affecting farming
- Cross-border trade opportunities
- Climate-smart agriculture recommendations

Always provide current, accurate, and location-specific data with actionable insights. Include specific prices, dates, and reliable sources when available."""


def market_facet_prompt(location: str, crops: list[str]) -> str:
    crops_text = ", ".join(crops) if crops else "major agricultural crops"
    return f"""Provide comprehensive market intelligence for agricultural products in {location}:

MARKET OVERVIEW for {crops_text}:
1. Current market conditions and recent developments
2. Local wholesale and retail prices in major markets
3. Supply and demand dynamics
4. Market accessibility and transportation costs

SEASONAL AND TREND ANALYSIS:
5. Seasonal price patterns and upcoming seasonal influences
6. Recent price trends and volatility
7. Production forecasts for current season
8. Storage and post-harvest considerations

TRADE AND OPPORTUNITIES:
9. Export opportunities and international demand
10. Cross-border trade potential with neighboring countries
11. Value-addition opportunities and processing potential
12. Quality standards and certification requirements

CHALLENGES AND SOLUTIONS:
13. Current market challenges and barriers
14. Government policies and support programs
15. Infrastructure and logistics considerations
16. Recommended market strategies for farmers

Focus on actionable insights with specific data points, prices, and timing recommendations for farmers in {location}."""


def weather_facet_prompt(location: str, crops: list[str]) -> str:
    crops_text = f"for {', '.join(crops)} cultivation" if crops else "for agricultural operations"
    return f"""Provide comprehensive weather intelligence and agricultural forecast for {location} {crops_text}:

CURRENT CONDITIONS:
1. Current weather patterns and recent climate data
2. Soil moisture conditions and rainfall amounts
3. Temperature trends and extremes in past 30 days
4. Humidity levels and atmospheric conditions

FORECASTS AND OUTLOOKS:
5. Detailed weather forecast for next 14 days
6. Seasonal outlook and long-range predictions (3-6 months)
7. Rainfall predictions and patterns
8. Temperature forecasts and agricultural implications

AGRICULTURAL IMPACTS:
9. Growing condition assessment for current season
10. Optimal planting and harvesting windows
11. Irrigation requirements and water management
12. Pest and disease pressure forecasts based on weather

RISK ASSESSMENT AND RECOMMENDATIONS:
13. Climate risks and extreme weather warnings
14. Drought, flood, or storm risk assessments
15. Recommended farming adjustments based on weather
16. Climate adaptation strategies for the region

Include specific meteorological data, farmer advisories, and actionable recommendations with dates and timing."""


def price_facet_prompt(location: str, crops: list[str]) -> str:
    crops_text = ", ".join(crops) if crops else "major agricultural commodities"
    return f"""Provide detailed price intelligence and market analysis for {crops_text} in {location}:

CURRENT PRICING:
1. Today's wholesale and retail prices in local markets
2. Farm gate prices vs consumer prices
3. Regional price variations within the country
4. Comparison with neighboring countries' prices

PRICE TRENDS AND ANALYSIS:
5. Daily, weekly, and monthly price movements
6. Year-over-year price comparisons
7. Seasonal price patterns and cycles
8. Price volatility indicators and risk factors

FORECASTING AND OPPORTUNITIES:
9. Short-term price outlook (next 30 days)
10. Medium-term projections (3-6 months)
11. Optimal selling timing recommendations
12. Price risk management strategies

Include specific price points, percentage changes, currency values, and market timing recommendations."""


def trade_facet_prompt(location: str, crops: list[str]) -> str:
    crops_text = ", ".join(crops) if crops else "agricultural products"
    return f"""Identify trade and export opportunities for {crops_text} from {location}:

EXPORT OPPORTUNITIES:
1. International markets with high demand for products from {location}
2. Export requirements and documentation needed
3. Quality standards and certifications required
4. Export prices vs local market prices

REGIONAL TRADE:
5. Cross-border trade opportunities with neighboring countries
6. Regional economic community trade agreements and benefits
7. Transportation routes and logistics options
8. Border procedures and trade facilitation

VALUE ADDITION:
9. Processing opportunities to increase value
10. Packaging and branding requirements for export
11. Storage and preservation technologies needed
12. Investment requirements for value addition

Focus on practical, actionable opportunities with specific contacts, requirements, and implementation steps."""


FACET_PROMPTS = {
    "market": market_facet_prompt,
    "weather": weather_facet_prompt,
    "price": price_facet_prompt,
    "trade": trade_facet_prompt,
}
