"""Review rejected template — sent when a moderator rejects a review."""


class ReviewRejectedTemplate:
    name = "review_rejected"

    @staticmethod
    def render(context: dict) -> dict:
        user_name = context.get("user_name") or "there"
        product_name = context.get("product_name", "the product")
        response = context.get("moderator_response")
        moderator_note = f"Moderator's response:\n{response}\n\n" if response else ""
        return {
            "subject": "Review update: action required",
            "body": (
                f"Hi {user_name},\n\n"
                f"We've looked at your review of {product_name}, but unfortunately "
                "we couldn't approve it at this time.\n\n"
                "Here's what you wrote:\n"
                f"{context.get('review_content', '')}\n\n"
                f"{moderator_note}"
                "Please feel free to submit a review that follows our community "
                "guidelines.\n\n"
                "The Storefront Team"
            ),
        }
