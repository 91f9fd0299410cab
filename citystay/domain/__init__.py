"""Pure booking logic: dates, rules, pricing, lifecycle, availability, and calendar."""
