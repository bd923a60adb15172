"""Review approved template — sent when a moderator approves a review."""


class ReviewApprovedTemplate:
    name = "review_approved"

    @staticmethod
    def render(context: dict) -> dict:
        user_name = context.get("user_name") or "there"
        product_name = context.get("product_name", "the product")
        return {
            "subject": "Your review has been approved!",
            "body": (
                f"Hi {user_name},\n\n"
                f"Great news! Your review of {product_name} has been approved "
                "and is now visible to other shoppers.\n\n"
                f"{context.get('review_content', '')}\n\n"
                "Thank you for sharing your experience.\n\n"
                "The Storefront Team"
            ),
        }
