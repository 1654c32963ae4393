"""Scripts evaluated inside pages by the retriever."""

# Clicks the first visible close control of common overlays, falling back
# to an Escape key press. Returns {"closed": <count>}.
POPUP_DISMISS_SCRIPT = """
(function() {
  let closed = 0;
  const selectors = [
    'button[aria-label*="close" i]',
    '.close-button', '.modal-close', '.popup-close', '.overlay-close',
    '[class*="close"][class*="button"]',
    '[data-dismiss="modal"]', '[data-close="true"]',
    '[class*="newsletter"] button[class*="close"]',
    '[class*="paywall"] button', '[id*="paywall"] button',
    '[id*="cookie"] button', '[class*="cookie"] button',
    'button.close',
    '.modal button:last-child',
    '[role="dialog"] button[aria-label*="close" i]',
    '[class*="popup"] button[class*="close"]',
  ];
  for (const selector of selectors) {
    try {
      for (const el of document.querySelectorAll(selector)) {
        const rect = el.getBoundingClientRect();
        const style = window.getComputedStyle(el);
        if (rect.width > 0 && rect.height > 0 && style.display !== 'none' && style.visibility !== 'hidden') {
          el.click();
          closed++;
          break;
        }
      }
    } catch (e) {}
  }
  if (closed === 0) {
    document.dispatchEvent(new KeyboardEvent('keydown', { key: 'Escape', keyCode: 27, bubbles: true }));
  }
  return { closed };
})()
"""

PAGE_HTML_SCRIPT = "document.documentElement.outerHTML"
