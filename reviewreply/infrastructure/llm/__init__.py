from .reply_generator import ReplyGenerator, OpenRouterReplyGenerator, build_prompt, strip_markdown
