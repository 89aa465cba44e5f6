"""Room catalog: the bookable resources of the hotel."""
